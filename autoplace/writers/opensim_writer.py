import os
import json
import shutil
from typing import Optional
from autoplace.config import OptimizationConfig
from autoplace.exceptions import WriteError
from autoplace.models.abstract_model import AbstractModel
from autoplace.search.result import SearchResult


def default_motion_path(output_model_path: str) -> str:
    return os.path.splitext(output_model_path)[0] + '.mot'


def write_search_results(result: SearchResult,
                         model: AbstractModel,
                         config: OptimizationConfig,
                         output_model_path: Optional[str] = None) -> str:
    """
    Persist a finished search: the placed model, the motion from the final accepted solve, and a JSON summary of
    the result next to the model. Returns the path of the written model.
    """
    if output_model_path is None:
        output_model_path = config.output_model_path
    if output_model_path == '':
        raise WriteError('No output model path was configured.')
    output_motion_path = config.output_motion_path
    if output_motion_path is None:
        output_motion_path = default_motion_path(output_model_path)
    summary_path = os.path.splitext(output_model_path)[0] + '.json'

    print('Writing the placed model to ' + output_model_path, flush=True)
    try:
        output_folder = os.path.dirname(output_model_path)
        if output_folder != '' and not os.path.exists(output_folder):
            os.makedirs(output_folder)
        model.save(output_model_path)

        if os.path.exists(config.worker_motion_path):
            shutil.copyfile(config.worker_motion_path, output_motion_path)
        else:
            print(f'Warning: no worker motion at {config.worker_motion_path}, skipping motion output', flush=True)

        summary = result.as_dict()
        summary['label'] = config.label
        summary['inputModel'] = config.model_path
        summary['outputModel'] = output_model_path
        summary['subjectMassKg'] = config.subject_mass_kg
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)
    except OSError as e:
        raise WriteError(f'Could not write results for {config.label}: {e}')
    return output_model_path
