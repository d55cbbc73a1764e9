from autoplace.exceptions import (Error, PathError, ConfigurationError, UnknownEntityError, ModelFileError,
                                  TrajectoryError, IKSolveFailure, ParameterOutOfBounds, ConvergenceNotReached,
                                  WriteError)
from autoplace.parameters import EntityKind, Axis, Parameter, ParameterStatus, ParameterSpace
from autoplace.config import OptimizationConfig, JointLocks
from autoplace.trajectory import MarkerTrajectory
from autoplace.cost import CostEvaluator, score
from autoplace.search import SearchEngine, SearchContext, SearchResult, SearchStatus, coarse_marker_search

__version__ = '0.1'
