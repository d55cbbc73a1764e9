"""
phases.py
---------
Description: Runs an ordered list of placement phases for one subject. Each phase is a set of options layered
             on shared defaults; a phase without an input model starts from the previous phase's output. All
             phases append to one log file.
"""
import os
import json
import threading
from typing import List, Dict, Any, Optional, Callable, Tuple
from autoplace.config import OptimizationConfig
from autoplace.exceptions import PathError, ConfigurationError
from autoplace.helpers import run_timestamp, output_model_name, log_file_name
from autoplace.models.abstract_model import AbstractModel
from autoplace.search.engine import coarse_marker_search
from autoplace.search.result import SearchResult, SearchStatus
from autoplace.writers.opensim_writer import write_search_results

SearchFunction = Callable[[OptimizationConfig, Optional[str], Optional[threading.Event]],
                          Tuple[SearchResult, AbstractModel]]


class PhasePlan:
    def __init__(self):
        self.subject: str = 'subject'
        self.prosthesis_type: str = 'prosthesis'
        self.output_dir: str = '.'
        self.log_dir: str = '.'
        self.defaults: Dict[str, Any] = {}
        self.phases: List[Dict[str, Any]] = []

    @staticmethod
    def load(path: str) -> 'PhasePlan':
        if not os.path.exists(path):
            raise PathError(f'Phase file {path} does not exist.')
        with open(path) as f:
            plan_json = json.load(f)
        return PhasePlan.parse(plan_json)

    @staticmethod
    def parse(plan_json: Dict[str, Any]) -> 'PhasePlan':
        plan = PhasePlan()
        if 'subject' in plan_json:
            plan.subject = plan_json['subject']
        if 'prosType' in plan_json:
            plan.prosthesis_type = plan_json['prosType']
        if 'outputDir' in plan_json:
            plan.output_dir = plan_json['outputDir']
        if 'logDir' in plan_json:
            plan.log_dir = plan_json['logDir']
        if 'defaults' in plan_json:
            plan.defaults = dict(plan_json['defaults'])
        if 'phases' not in plan_json or len(plan_json['phases']) == 0:
            raise ConfigurationError('A phase file needs a non-empty "phases" list.')
        plan.phases = [dict(phase) for phase in plan_json['phases']]
        unknown = set(plan_json.keys()) - {'subject', 'prosType', 'outputDir', 'logDir', 'defaults', 'phases'}
        if len(unknown) > 0:
            raise ConfigurationError('Unknown phase file key(s): ' + ', '.join(sorted(unknown)))
        return plan

    def build_configs(self, timestamp: str) -> List[OptimizationConfig]:
        """
        Resolve every phase into a full config up front, so a mistake in the last phase is reported before the
        first one starts running.
        """
        configs: List[OptimizationConfig] = []
        previous_output: Optional[str] = None
        for i, phase in enumerate(self.phases):
            options: Dict[str, Any] = dict(self.defaults)
            options.update(phase)
            options.setdefault('label', f'phase{i + 1}')
            options.setdefault('logDir', self.log_dir)
            if 'model' not in options:
                if previous_output is None:
                    raise ConfigurationError(f'Phase "{options["label"]}" has no input model, and there is no '
                                             f'earlier phase to take one from.')
                options['model'] = previous_output
            if 'newName' not in options:
                options['newName'] = os.path.join(self.output_dir, output_model_name(
                    self.subject, self.prosthesis_type, options['label'], timestamp))
            config = OptimizationConfig.from_options(options)
            configs.append(config)
            previous_output = config.output_model_path
        return configs


class PhaseOutcome:
    def __init__(self, config: OptimizationConfig, result: SearchResult, output_model_path: str):
        self.config = config
        self.result = result
        self.output_model_path = output_model_path


def run_phases(plan: PhasePlan,
               search: SearchFunction = coarse_marker_search,
               cancel_event: Optional[threading.Event] = None,
               timestamp: Optional[str] = None) -> List[PhaseOutcome]:
    if timestamp is None:
        timestamp = run_timestamp()
    configs = plan.build_configs(timestamp)
    log_path = os.path.join(plan.log_dir, log_file_name(f'{plan.subject}_{plan.prosthesis_type}', timestamp))

    outcomes: List[PhaseOutcome] = []
    for i, config in enumerate(configs):
        print(f'[{i + 1}/{len(configs)}] Running phase "{config.label}" on {config.model_path}', flush=True)
        result, model = search(config, log_path, cancel_event)
        output_model_path = write_search_results(result, model, config)
        outcomes.append(PhaseOutcome(config, result, output_model_path))
        if result.status == SearchStatus.CAP_EXCEEDED:
            print(f'Warning: phase "{config.label}" did not converge within {config.max_passes} passes; '
                  f'continuing from its best placement', flush=True)
        elif result.status in [SearchStatus.CANCELLED, SearchStatus.TIMED_OUT]:
            print(f'Phase "{config.label}" stopped early ({result.status.name}); skipping remaining phases',
                  flush=True)
            break
    return outcomes
