from typing import List, Dict, Optional
import numpy as np
from autoplace.exceptions import IKSolveFailure
from autoplace.models.abstract_model import AbstractModel
from autoplace.trajectory import MarkerTrajectory

# Residual (meters) assigned to every marker on a frame the solver could not converge.
FAILED_FRAME_RESIDUAL = 1.0


class FrameResult:
    def __init__(self,
                 timestamp: float,
                 joint_angles: Dict[str, float],
                 marker_residuals: Dict[str, float],
                 converged: bool = True,
                 error: Optional[IKSolveFailure] = None):
        self.timestamp = timestamp
        self.joint_angles = joint_angles
        self.marker_residuals = marker_residuals
        self.converged = converged
        self.error = error

    @staticmethod
    def failed(timestamp: float, marker_names: List[str], error: Optional[IKSolveFailure] = None) -> 'FrameResult':
        return FrameResult(timestamp, {}, {name: FAILED_FRAME_RESIDUAL for name in marker_names}, converged=False,
                           error=error)


class IKResult:
    """Per-frame joint angles and marker residuals from one full IK solve."""

    def __init__(self, frames: List[FrameResult]):
        self.frames = frames

    def num_frames(self) -> int:
        return len(self.frames)

    def num_failed_frames(self) -> int:
        return len([frame for frame in self.frames if not frame.converged])

    def residuals(self) -> np.ndarray:
        values: List[float] = []
        for frame in self.frames:
            values.extend(frame.marker_residuals.values())
        return np.array(values, dtype=float)

    def coordinate_value(self, coordinate: str, frame_index: int) -> Optional[float]:
        """The solved value of a coordinate at a frame, or None if that frame failed to converge."""
        frame = self.frames[frame_index]
        if not frame.converged:
            return None
        return frame.joint_angles[coordinate]


class AbstractIKSolver:
    def __init__(self):
        pass

    def solve(self, model: AbstractModel, trajectory: MarkerTrajectory) -> IKResult:
        raise NotImplementedError()
