from autoplace.commands.abstract_command import AbstractCommand
import argparse
import json
import os
import signal
import threading
import time
from autoplace.helpers import get_absolute_path


def install_cancel_handler(cancel_event: threading.Event):
    """
    The first Ctrl-C sets `cancel_event`, so the search stops between trials and still writes the best placement
    found so far. It also puts back the previous handler, so a second Ctrl-C interrupts a stuck solve.
    Returns the previous handler.
    """
    previous_handler = signal.getsignal(signal.SIGINT)
    if previous_handler is None:
        previous_handler = signal.SIG_DFL

    def on_interrupt(signum, frame):
        print('Stopping after the current IK solve (press Ctrl-C again to abort)', flush=True)
        cancel_event.set()
        signal.signal(signal.SIGINT, previous_handler)

    signal.signal(signal.SIGINT, on_interrupt)
    return previous_handler


class RunCommand(AbstractCommand):
    def register_subcommand(self, subparsers: argparse._SubParsersAction):
        parser = subparsers.add_parser(
            'run', help='Run every placement phase listed in a phase file (JSON), writing a timestamped model for '
                        'each phase and a shared log of every parameter movement.')
        parser.add_argument('phase_file', type=str)
        parser.add_argument(
            '--only-phase',
            help='Run only the phase with this label. Its input model must then be given explicitly.',
            type=str,
            default=None)

    def run(self, args: argparse.Namespace) -> bool:
        if args.command != 'run':
            return False
        from autoplace.exceptions import Error
        from autoplace.phases import PhasePlan, run_phases

        phase_file = get_absolute_path(args.phase_file)
        errors_json_path = os.path.splitext(phase_file)[0] + '_errors.json'
        try:
            plan = PhasePlan.load(phase_file)
            if args.only_phase is not None:
                plan.phases = [phase for phase in plan.phases if phase.get('label') == args.only_phase]
                if len(plan.phases) == 0:
                    print(f'No phase labelled "{args.only_phase}" in {args.phase_file}')
                    return True

            cancel_event = threading.Event()
            previous_handler = install_cancel_handler(cancel_event)
            start = time.time()
            try:
                outcomes = run_phases(plan, cancel_event=cancel_event)
            finally:
                signal.signal(signal.SIGINT, previous_handler)
        except Error as e:
            # If we failed, write a JSON file with the error information.
            print(e, flush=True)
            json_data = json.dumps(e.get_error_dict(), indent=4)
            with open(errors_json_path, 'w') as json_file:
                print('ERRORS:', flush=True)
                print(json_data, flush=True)
                json_file.write(json_data)
            # Non-zero exit code so wrapping scripts can tell the run failed
            exit(1)

        print(f'Finished {len(outcomes)} of {len(plan.phases)} phases in {time.time() - start:.1f}s', flush=True)
        for outcome in outcomes:
            print(f' > {outcome.config.label}: {outcome.result.status.name}, {outcome.result.iterations} passes, '
                  f'cost {outcome.result.final_cost:.4f} -> {outcome.output_model_path}')
        return True
