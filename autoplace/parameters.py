"""
parameters.py
-------------
Description: The adjustable quantities of a placement run (marker offsets, joint location and orientation
             components), and their Locked / Fixed / Free classification.
"""
import enum
import math
from typing import List, Dict, Tuple, Set, NamedTuple, TYPE_CHECKING
from autoplace.exceptions import ConfigurationError, UnknownEntityError

if TYPE_CHECKING:
    from autoplace.config import OptimizationConfig
    from autoplace.models.abstract_model import AbstractModel


class EntityKind(enum.Enum):
    MARKER = 0
    JOINT_LOCATION = 1
    JOINT_ORIENTATION = 2


class Axis(enum.Enum):
    X = 0
    Y = 1
    Z = 2

    @staticmethod
    def parse(text: str) -> 'Axis':
        try:
            return Axis[text.strip().upper()]
        except KeyError:
            raise UnknownEntityError(f'"{text}" is not an axis. Expected one of x, y or z.')


class ParameterStatus(enum.Enum):
    LOCKED = 0
    FIXED = 1
    FREE = 2


# Token suffixes that address the placement of a joint in its parent body.
JOINT_LOCATION_SUFFIXES = ['_JOINT_CENTER', '_JOINT_LOC_IN_BODY']
JOINT_ORIENTATION_SUFFIXES = ['_JOINT_ORIENT']


class Parameter(NamedTuple):
    kind: EntityKind
    entity: str
    axis: Axis

    @property
    def token(self) -> str:
        if self.kind == EntityKind.JOINT_LOCATION:
            return f'{self.entity}_JOINT_CENTER {self.axis.name.lower()}'
        if self.kind == EntityKind.JOINT_ORIENTATION:
            return f'{self.entity}_JOINT_ORIENT {self.axis.name.lower()}'
        return f'{self.entity} {self.axis.name.lower()}'

    @property
    def scale(self) -> float:
        """Multiplier from the stored value (meters or radians) to reporting units (millimeters or degrees)."""
        if self.kind == EntityKind.JOINT_ORIENTATION:
            return 180.0 / math.pi
        return 1000.0

    @property
    def units(self) -> str:
        return 'deg' if self.kind == EntityKind.JOINT_ORIENTATION else 'mm'

    def sort_key(self) -> Tuple[str, int, int]:
        return self.entity, self.kind.value, self.axis.value


def parse_coordinate_token(token: str) -> Parameter:
    """
    Parse an "<entity> <axis>" token, e.g. "L_TOE x" or "socket_JOINT_ORIENT y", into a typed Parameter. Only the
    shape of the token is checked here; whether the entity exists is checked against the model by ParameterSpace.
    """
    parts = token.split()
    if len(parts) != 2:
        raise ConfigurationError(f'Coordinate token "{token}" must have the form "<entity> <axis>".')
    entity, axis_text = parts
    axis = Axis.parse(axis_text)
    upper = entity.upper()
    for suffix in JOINT_LOCATION_SUFFIXES:
        if upper.endswith(suffix) and len(entity) > len(suffix):
            return Parameter(EntityKind.JOINT_LOCATION, entity[:-len(suffix)], axis)
    for suffix in JOINT_ORIENTATION_SUFFIXES:
        if upper.endswith(suffix) and len(entity) > len(suffix):
            return Parameter(EntityKind.JOINT_ORIENTATION, entity[:-len(suffix)], axis)
    return Parameter(EntityKind.MARKER, entity, axis)


class ParameterSpace:
    """
    Every parameter touched by a run, in a deterministic order (entity name, then kind, then axis), along with its
    classification. Construction validates every configured name against the model, so a typo fails here instead
    of partway through a search.
    """

    def __init__(self, config: 'OptimizationConfig', model: 'AbstractModel'):
        self.locked: Set[Parameter] = set()
        self.fixed: Set[Parameter] = set()

        missing: List[str] = []
        for name in config.marker_names:
            if not model.has_marker(name):
                missing.append(f'marker "{name}"')
        for name in config.joint_names:
            if not model.has_joint(name):
                missing.append(f'joint "{name}"')
        for ref in config.fixed_coordinates:
            if ref.kind == EntityKind.MARKER and not model.has_marker(ref.entity):
                missing.append(f'marker "{ref.entity}" (from fixed coordinate "{ref.token}")')
            elif ref.kind != EntityKind.MARKER and not model.has_joint(ref.entity):
                missing.append(f'joint "{ref.entity}" (from fixed coordinate "{ref.token}")')
        if len(missing) > 0:
            raise UnknownEntityError('The model does not contain: ' + ', '.join(missing))

        all_parameters: Set[Parameter] = set()
        for name in config.marker_names:
            for axis in Axis:
                all_parameters.add(Parameter(EntityKind.MARKER, name, axis))
        lock_map: Dict[Parameter, bool] = {}
        for name in config.joint_names:
            for (kind, axis), is_locked in config.joint_locks.by_component().items():
                parameter = Parameter(kind, name, axis)
                all_parameters.add(parameter)
                lock_map[parameter] = is_locked
        for ref in config.fixed_coordinates:
            all_parameters.add(ref)
            self.fixed.add(ref)
        self.locked = set([p for p, is_locked in lock_map.items() if is_locked])

        self.parameters: List[Parameter] = sorted(all_parameters, key=lambda p: p.sort_key())

    def enumerate(self) -> List[Parameter]:
        return list(self.parameters)

    def classify(self, parameter: Parameter) -> ParameterStatus:
        if parameter in self.locked:
            return ParameterStatus.LOCKED
        if parameter in self.fixed:
            return ParameterStatus.FIXED
        if parameter not in self.parameters:
            raise UnknownEntityError(f'Parameter "{parameter.token}" is not part of this run.')
        return ParameterStatus.FREE

    def free_parameters(self) -> List[Parameter]:
        return [p for p in self.parameters if self.classify(p) == ParameterStatus.FREE]

    def __len__(self):
        return len(self.parameters)
