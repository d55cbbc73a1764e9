from autoplace.commands.abstract_command import AbstractCommand
import argparse
import os
from autoplace.helpers import get_absolute_path, format_table


class CheckCommand(AbstractCommand):
    def register_subcommand(self, subparsers: argparse._SubParsersAction):
        parser = subparsers.add_parser(
            'check', help='Validate a phase file against its models without solving any IK: every configured '
                          'marker, joint and fixed coordinate must exist, and each parameter is listed with '
                          'its Locked / Fixed / Free classification.')
        parser.add_argument('phase_file', type=str)

    def run(self, args: argparse.Namespace) -> bool:
        if args.command != 'check':
            return False
        from autoplace.phases import PhasePlan
        from autoplace.helpers import run_timestamp
        from autoplace.models.opensim_model import load_model
        from autoplace.parameters import ParameterSpace

        plan = PhasePlan.load(get_absolute_path(args.phase_file))
        configs = plan.build_configs(run_timestamp())
        # Later phases read the output of earlier ones, which does not exist yet; those are checked against the
        # last model that does exist, which carries the same markers and joints.
        model = None
        for config in configs:
            if os.path.exists(config.model_path):
                model = load_model(config.model_path)
            if model is None:
                print(f'Phase "{config.label}": input model {config.model_path} does not exist')
                continue
            space = ParameterSpace(config, model)
            rows = [['parameter', 'status', 'value']]
            for parameter in space.enumerate():
                rows.append([parameter.token, space.classify(parameter).name,
                             f'{model.get(parameter) * parameter.scale:+.3f} {parameter.units}'])
            print(f'Phase "{config.label}": {len(space.free_parameters())} free of {len(space)} parameters')
            print(format_table(rows))
            print()
        return True
