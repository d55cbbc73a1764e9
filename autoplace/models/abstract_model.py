from typing import Dict, List, Tuple
from autoplace.parameters import Parameter, EntityKind
from autoplace.exceptions import ConfigurationError, ParameterOutOfBounds, UnknownEntityError


class AbstractModel:
    """
    Named get / set access to the marker offsets and joint placements of a body model. Subclasses provide the
    storage (`_get_value`, `_set_value`) and persistence (`save`); range checking lives here so every backend
    rejects implausible values the same way.
    """

    def __init__(self):
        self.path: str = ''
        self.limits: Dict[Parameter, Tuple[float, float]] = {}

    def marker_names(self) -> List[str]:
        raise NotImplementedError()

    def joint_names(self) -> List[str]:
        raise NotImplementedError()

    def coordinate_names(self) -> List[str]:
        raise NotImplementedError()

    def has_marker(self, name: str) -> bool:
        return name in self.marker_names()

    def has_joint(self, name: str) -> bool:
        return name in self.joint_names()

    def _get_value(self, parameter: Parameter) -> float:
        raise NotImplementedError()

    def _set_value(self, parameter: Parameter, value: float):
        raise NotImplementedError()

    def save(self, path: str):
        raise NotImplementedError()

    def _check_entity(self, parameter: Parameter):
        if parameter.kind == EntityKind.MARKER:
            if not self.has_marker(parameter.entity):
                raise UnknownEntityError(f'Model has no marker named "{parameter.entity}".')
        elif not self.has_joint(parameter.entity):
            raise UnknownEntityError(f'Model has no joint named "{parameter.entity}".')

    def declare_limits(self, parameter: Parameter, lower: float, upper: float):
        if lower > upper:
            raise ConfigurationError(f'Empty range [{lower:.6f}, {upper:.6f}] declared for {parameter.token}')
        self.limits[parameter] = (lower, upper)

    def get(self, parameter: Parameter) -> float:
        self._check_entity(parameter)
        return float(self._get_value(parameter))

    def set(self, parameter: Parameter, value: float):
        self._check_entity(parameter)
        if parameter in self.limits:
            lower, upper = self.limits[parameter]
            if value < lower or value > upper:
                raise ParameterOutOfBounds(f'{parameter.token} = {value:.6f} is outside [{lower:.6f}, {upper:.6f}]')
        self._set_value(parameter, float(value))
