import os
from typing import List
from autoplace.models.abstract_model import AbstractModel
from autoplace.parameters import Parameter, EntityKind
from autoplace.exceptions import PathError, ModelFileError


class OpenSimModel(AbstractModel):
    """
    An OpenSim .osim model. Markers expose their `location` in the parent body frame; a joint's placement is the
    translation / orientation of its parent offset frame (frames[0]).
    """

    def __init__(self, path: str):
        super().__init__()
        import opensim as osim
        self.path = path
        try:
            self.osim_model = osim.Model(path)
            self.osim_model.initSystem()
        except RuntimeError as e:
            raise ModelFileError(f'Could not load {path}: {e}')
        self._marker_names: List[str] = [marker.getName() for marker in self.osim_model.getMarkerSet()]
        self._joint_names: List[str] = [joint.getName() for joint in self.osim_model.getJointSet()]
        self._coordinate_names: List[str] = [coord.getName() for coord in self.osim_model.getCoordinateSet()]

    def marker_names(self) -> List[str]:
        return self._marker_names

    def joint_names(self) -> List[str]:
        return self._joint_names

    def coordinate_names(self) -> List[str]:
        return self._coordinate_names

    def _parent_frame(self, joint_name: str):
        return self.osim_model.updJointSet().get(joint_name).upd_frames(0)

    def _get_vec3(self, parameter: Parameter):
        if parameter.kind == EntityKind.MARKER:
            return self.osim_model.getMarkerSet().get(parameter.entity).get_location()
        frame = self._parent_frame(parameter.entity)
        if parameter.kind == EntityKind.JOINT_LOCATION:
            return frame.get_translation()
        return frame.get_orientation()

    def _get_value(self, parameter: Parameter) -> float:
        return self._get_vec3(parameter).get(parameter.axis.value)

    def _set_value(self, parameter: Parameter, value: float):
        import opensim as osim
        current = self._get_vec3(parameter)
        values = [current.get(i) for i in range(3)]
        values[parameter.axis.value] = value
        vec = osim.Vec3(values[0], values[1], values[2])
        if parameter.kind == EntityKind.MARKER:
            self.osim_model.updMarkerSet().get(parameter.entity).set_location(vec)
        elif parameter.kind == EntityKind.JOINT_LOCATION:
            self._parent_frame(parameter.entity).set_translation(vec)
        else:
            self._parent_frame(parameter.entity).set_orientation(vec)

    def save(self, path: str):
        self.osim_model.finalizeConnections()
        self.osim_model.initSystem()
        self.osim_model.printToXML(path)


def load_model(path: str) -> OpenSimModel:
    if not os.path.exists(path):
        raise PathError(f'Model file {path} does not exist.')
    return OpenSimModel(path)
