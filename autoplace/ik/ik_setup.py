import os
from typing import Dict, Optional
from autoplace.exceptions import PathError, ConfigurationError


def resolve_relative_to(base_file: str, path: str) -> str:
    if path == '' or os.path.isabs(path):
        return path
    return os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(base_file)), path))


class IKSetup:
    """
    The contents of an OpenSim InverseKinematicsTool setup file that the search consumes: file paths, the time
    range, solver settings, and per-marker weights. Marker weights are only ever read, never optimized.
    """

    def __init__(self):
        self.setup_path: str = ''
        self.model_file: str = ''
        self.marker_file: str = ''
        self.output_motion_file: str = ''
        self.start_time: float = float('-inf')
        self.end_time: float = float('inf')
        self.accuracy: float = 1e-5
        self.constraint_weight: float = float('inf')
        self.marker_weights: Dict[str, float] = {}
        self._tool = None

    @staticmethod
    def load(setup_path: str) -> 'IKSetup':
        if not os.path.exists(setup_path):
            raise PathError(f'IK setup file {setup_path} does not exist.')
        import opensim as osim
        try:
            tool = osim.InverseKinematicsTool(setup_path)
        except RuntimeError as e:
            raise ConfigurationError(f'Could not read IK setup {setup_path}: {e}')

        setup = IKSetup()
        setup._tool = tool
        setup.setup_path = setup_path
        setup.model_file = resolve_relative_to(
            setup_path, osim.PropertyHelper.getValueString(tool.getPropertyByName('model_file')))
        setup.marker_file = resolve_relative_to(
            setup_path, osim.PropertyHelper.getValueString(tool.getPropertyByName('marker_file')))
        setup.output_motion_file = resolve_relative_to(
            setup_path, osim.PropertyHelper.getValueString(tool.getPropertyByName('output_motion_file')))
        setup.start_time = tool.getStartTime()
        setup.end_time = tool.getEndTime()
        setup.accuracy = tool.get_accuracy()
        setup.constraint_weight = tool.get_constraint_weight()

        task_set = tool.getIKTaskSet()
        for i in range(task_set.getSize()):
            task = task_set.get(i)
            if task.getConcreteClassName() == 'IKMarkerTask' and task.getApply():
                setup.marker_weights[task.getName()] = task.getWeight()
        return setup

    def retarget(self,
                 model_file: Optional[str] = None,
                 marker_file: Optional[str] = None,
                 output_motion_file: Optional[str] = None):
        if model_file is not None:
            self.model_file = model_file
        if marker_file is not None:
            self.marker_file = marker_file
        if output_motion_file is not None:
            self.output_motion_file = output_motion_file

    def write(self, path: str):
        """Print the setup back to XML with the current file paths, so it can be rerun in the OpenSim GUI."""
        assert self._tool is not None, 'Only setups loaded from a file can be written back'
        import opensim as osim
        osim.PropertyHelper.setValueString(self.model_file, self._tool.getPropertyByName('model_file'))
        osim.PropertyHelper.setValueString(self.marker_file, self._tool.getPropertyByName('marker_file'))
        osim.PropertyHelper.setValueString(self.output_motion_file,
                                           self._tool.getPropertyByName('output_motion_file'))
        self._tool.printToXML(path)
