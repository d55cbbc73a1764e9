"""
config.py
---------
Description: The immutable configuration record for one marker placement run, and its parser from the
             legacy option-bag keys.
"""
import os
import json
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple, Any, Optional, List
from autoplace.exceptions import ConfigurationError
from autoplace.parameters import EntityKind, Axis, Parameter, parse_coordinate_token


@dataclass(frozen=True)
class JointLocks:
    """Per-component lock flags for every joint being placed."""
    tx: bool = False
    ty: bool = False
    tz: bool = False
    flexion: bool = False
    adduction: bool = False
    rotation: bool = False

    def by_component(self) -> Dict[Tuple[EntityKind, Axis], bool]:
        # Flexion is about the body-fixed Z axis, adduction about X and axial rotation about Y.
        return {
            (EntityKind.JOINT_LOCATION, Axis.X): self.tx,
            (EntityKind.JOINT_LOCATION, Axis.Y): self.ty,
            (EntityKind.JOINT_LOCATION, Axis.Z): self.tz,
            (EntityKind.JOINT_ORIENTATION, Axis.X): self.adduction,
            (EntityKind.JOINT_ORIENTATION, Axis.Y): self.rotation,
            (EntityKind.JOINT_ORIENTATION, Axis.Z): self.flexion,
        }


@dataclass(frozen=True)
class OptimizationConfig:
    # Files
    ik_setup_path: str = ''
    model_path: str = ''
    worker_model_path: str = 'autoPlaceWorker.osim'
    worker_motion_path: str = 'autoPlaceWorker.mot'
    output_model_path: str = ''
    output_motion_path: Optional[str] = None
    marker_file: Optional[str] = None
    log_dir: str = '.'

    # Subject
    subject_mass_kg: float = 68.0
    label: str = 'autoplace'

    # What gets placed
    joint_locks: JointLocks = field(default_factory=JointLocks)
    marker_names: Tuple[str, ...] = ()
    joint_names: Tuple[str, ...] = ()
    fixed_coordinates: Tuple[Parameter, ...] = ()

    # Auxiliary socket objectives
    optimize_zeros: bool = False
    flexion_zero_frame: int = 0
    pistoning_frame: Optional[int] = None
    flexion_coordinate: str = 'socket_flexion'
    pistoning_coordinate: str = 'socket_ty'
    flexion_weight: float = 1.0
    pistoning_weight: float = 1.0

    # Search
    conv_thresh_mm: float = 1.0
    initial_step_mm: float = 4.0
    unit_step_mm: float = 1.0
    max_line_steps: int = 10
    max_passes: int = 100
    max_wall_time_s: Optional[float] = None
    min_improvement: float = 1e-9

    # Plausibility windows, measured from the value at the start of the run
    max_marker_excursion_mm: float = 50.0
    max_joint_excursion_mm: float = 30.0
    max_joint_rotation_deg: float = 15.0

    def __post_init__(self):
        # Accept lists and raw "<entity> <axis>" strings, but always store typed tuples.
        object.__setattr__(self, 'marker_names', tuple(self.marker_names))
        object.__setattr__(self, 'joint_names', tuple(self.joint_names))
        object.__setattr__(self, 'fixed_coordinates', tuple(
            ref if isinstance(ref, Parameter) else parse_coordinate_token(ref) for ref in self.fixed_coordinates))

        problems: List[str] = []
        if self.subject_mass_kg <= 0:
            problems.append(f'subject mass must be positive, got {self.subject_mass_kg}')
        if self.conv_thresh_mm <= 0:
            problems.append(f'convergence threshold must be positive, got {self.conv_thresh_mm}')
        if self.unit_step_mm <= 0:
            problems.append(f'unit step must be positive, got {self.unit_step_mm}')
        if self.initial_step_mm < self.unit_step_mm:
            problems.append(f'initial step ({self.initial_step_mm}) must not be smaller than the unit step '
                            f'({self.unit_step_mm})')
        if self.max_line_steps < 0:
            problems.append(f'max line steps must not be negative, got {self.max_line_steps}')
        if self.max_passes < 1:
            problems.append(f'max passes must be at least 1, got {self.max_passes}')
        if self.max_wall_time_s is not None and self.max_wall_time_s <= 0:
            problems.append(f'max wall time must be positive, got {self.max_wall_time_s}')
        if self.min_improvement < 0:
            problems.append(f'min improvement must not be negative, got {self.min_improvement}')
        if self.flexion_zero_frame < 0:
            problems.append(f'flexion zero frame must not be negative, got {self.flexion_zero_frame}')
        if self.pistoning_frame is not None and self.pistoning_frame < 0:
            problems.append(f'pistoning frame must not be negative, got {self.pistoning_frame}')
        if self.flexion_weight < 0 or self.pistoning_weight < 0:
            problems.append('auxiliary objective weights must not be negative')
        for name in ['max_marker_excursion_mm', 'max_joint_excursion_mm', 'max_joint_rotation_deg']:
            if getattr(self, name) <= 0:
                problems.append(f'{name} must be positive, got {getattr(self, name)}')
        if len(set(self.marker_names)) != len(self.marker_names):
            problems.append('marker names must not repeat')
        if len(set(self.joint_names)) != len(self.joint_names):
            problems.append('joint names must not repeat')
        if len(problems) > 0:
            raise ConfigurationError('; '.join(problems))

    @property
    def pistoning_reference_frame(self) -> int:
        return self.flexion_zero_frame if self.pistoning_frame is None else self.pistoning_frame

    def step_sizes(self) -> List[float]:
        """Step sizes in reporting units, halving from the initial step and always ending on the unit step."""
        steps: List[float] = []
        step = self.initial_step_mm
        while step > self.unit_step_mm * (1 + 1e-9):
            steps.append(step)
            step /= 2.0
        steps.append(self.unit_step_mm)
        return steps

    def excursion_limit(self, parameter: Parameter) -> float:
        """The plausibility window for a parameter, in its stored units (meters or radians)."""
        if parameter.kind == EntityKind.MARKER:
            return self.max_marker_excursion_mm / parameter.scale
        if parameter.kind == EntityKind.JOINT_LOCATION:
            return self.max_joint_excursion_mm / parameter.scale
        return self.max_joint_rotation_deg / parameter.scale

    def with_overrides(self, **kwargs) -> 'OptimizationConfig':
        return replace(self, **kwargs)

    @staticmethod
    def from_options(options: Dict[str, Any]) -> 'OptimizationConfig':
        """
        Build a config from an option dictionary. The legacy option keys (IKsetup, model, subjectMass, newName,
        modelWorker, motionWorker, txLock ... rotLock, markerNames, jointNames, fixedMarkerCoords, flexionZero,
        optZerosFlag, convThresh) are accepted, as are camelCase spellings of the remaining fields. Unknown keys
        are an error.
        """
        kwargs: Dict[str, Any] = {}
        locks: Dict[str, bool] = {}
        unknown: List[str] = []
        for key, value in options.items():
            if key in LOCK_KEYS:
                locks[LOCK_KEYS[key]] = bool(value)
            elif key in OPTION_KEYS:
                kwargs[OPTION_KEYS[key]] = value
            else:
                unknown.append(key)
        if len(unknown) > 0:
            raise ConfigurationError('Unknown option(s): ' + ', '.join(sorted(unknown)))
        kwargs['joint_locks'] = JointLocks(**locks)
        try:
            return OptimizationConfig(**kwargs)
        except TypeError as e:
            raise ConfigurationError(str(e))

    @staticmethod
    def load_json(path: str) -> 'OptimizationConfig':
        if not os.path.exists(path):
            raise ConfigurationError(f'Options file {path} does not exist.')
        with open(path) as f:
            options = json.load(f)
        return OptimizationConfig.from_options(options)


LOCK_KEYS: Dict[str, str] = {
    'txLock': 'tx',
    'tyLock': 'ty',
    'tzLock': 'tz',
    'flexLock': 'flexion',
    'adducLock': 'adduction',
    'rotLock': 'rotation',
}

OPTION_KEYS: Dict[str, str] = {
    # Legacy option keys
    'IKsetup': 'ik_setup_path',
    'model': 'model_path',
    'subjectMass': 'subject_mass_kg',
    'newName': 'output_model_path',
    'modelWorker': 'worker_model_path',
    'motionWorker': 'worker_motion_path',
    'markerNames': 'marker_names',
    'jointNames': 'joint_names',
    'fixedMarkerCoords': 'fixed_coordinates',
    'flexionZero': 'flexion_zero_frame',
    'optZerosFlag': 'optimize_zeros',
    'convThresh': 'conv_thresh_mm',
    # Additional settings
    'outputMotion': 'output_motion_path',
    'markerFile': 'marker_file',
    'logDir': 'log_dir',
    'label': 'label',
    'pistoningFrame': 'pistoning_frame',
    'flexionCoordinate': 'flexion_coordinate',
    'pistoningCoordinate': 'pistoning_coordinate',
    'flexionWeight': 'flexion_weight',
    'pistoningWeight': 'pistoning_weight',
    'initialStep': 'initial_step_mm',
    'unitStep': 'unit_step_mm',
    'maxLineSteps': 'max_line_steps',
    'maxPasses': 'max_passes',
    'maxWallTime': 'max_wall_time_s',
    'minImprovement': 'min_improvement',
    'maxMarkerExcursion': 'max_marker_excursion_mm',
    'maxJointExcursion': 'max_joint_excursion_mm',
    'maxJointRotation': 'max_joint_rotation_deg',
}
