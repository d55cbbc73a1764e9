"""
cost.py
-------
Description: Reduces one IK solve to the scalar cost minimized by the marker search. The base term is the RMS
             marker residual in millimeters. When auxiliary objectives are enabled, weighted penalties for socket
             flexion (degrees away from zero) and pistoning (millimeters of axial translation) at the reference
             frames are added.
"""
import math
from typing import NamedTuple, Optional
import numpy as np
from autoplace.config import OptimizationConfig
from autoplace.exceptions import ConfigurationError, UnknownEntityError
from autoplace.ik.abstract_solver import IKResult, FAILED_FRAME_RESIDUAL
from autoplace.models.abstract_model import AbstractModel


class CostBreakdown(NamedTuple):
    total: float
    marker_rms_mm: float
    flexion_penalty: float
    pistoning_penalty: float
    failed_frames: int


def marker_rms_mm(ik_result: IKResult) -> float:
    residuals = ik_result.residuals()
    if len(residuals) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(residuals)))) * 1000.0


class CostEvaluator:
    def __init__(self, config: OptimizationConfig):
        self.config = config

    def validate(self, model: AbstractModel, num_frames: int):
        """Startup checks for the auxiliary objectives, so a bad coordinate name or frame never surfaces mid-run."""
        if not self.config.optimize_zeros:
            return
        for coordinate in [self.config.flexion_coordinate, self.config.pistoning_coordinate]:
            if coordinate not in model.coordinate_names():
                raise UnknownEntityError(f'Model has no coordinate named "{coordinate}".')
        for frame in [self.config.flexion_zero_frame, self.config.pistoning_reference_frame]:
            if frame >= num_frames:
                raise ConfigurationError(f'Reference frame {frame} is past the end of the trajectory '
                                         f'({num_frames} frames).')

    def _penalty(self, value: Optional[float], to_units: float, weight: float) -> float:
        # A reference frame that failed to solve is penalized like a failed marker frame.
        if value is None:
            return weight * FAILED_FRAME_RESIDUAL * 1000.0
        return weight * abs(value * to_units)

    def evaluate(self, ik_result: IKResult) -> CostBreakdown:
        rms = marker_rms_mm(ik_result)
        flexion_penalty = 0.0
        pistoning_penalty = 0.0
        if self.config.optimize_zeros:
            flexion = ik_result.coordinate_value(self.config.flexion_coordinate, self.config.flexion_zero_frame)
            flexion_penalty = self._penalty(flexion, 180.0 / math.pi, self.config.flexion_weight)
            pistoning = ik_result.coordinate_value(self.config.pistoning_coordinate,
                                                   self.config.pistoning_reference_frame)
            pistoning_penalty = self._penalty(pistoning, 1000.0, self.config.pistoning_weight)
        return CostBreakdown(total=rms + flexion_penalty + pistoning_penalty,
                             marker_rms_mm=rms,
                             flexion_penalty=flexion_penalty,
                             pistoning_penalty=pistoning_penalty,
                             failed_frames=ik_result.num_failed_frames())

    def score(self, ik_result: IKResult) -> float:
        return self.evaluate(ik_result).total


def score(ik_result: IKResult, config: OptimizationConfig) -> float:
    return CostEvaluator(config).score(ik_result)
