import os
from typing import List, Dict, Optional, Tuple
import numpy as np
from autoplace.exceptions import PathError, TrajectoryError


def deep_copy_marker_observations(original_observations: List[Dict[str, np.ndarray]]) -> List[Dict[str, np.ndarray]]:
    marker_observations: List[Dict[str, np.ndarray]] = []
    for marker_timestep in original_observations:
        marker_timestep_copy = {}
        for marker in marker_timestep:
            marker_timestep_copy[marker] = np.array(marker_timestep[marker], dtype=float).reshape(3)
        marker_observations.append(marker_timestep_copy)
    return marker_observations


class MarkerTrajectory:
    """
    An ordered sequence of experimental frames, each a timestamp plus a map from marker name to its 3D position in
    meters.
    """

    def __init__(self, timestamps: List[float], marker_observations: List[Dict[str, np.ndarray]]):
        if len(timestamps) != len(marker_observations):
            raise TrajectoryError(f'Got {len(timestamps)} timestamps but {len(marker_observations)} marker frames.')
        self.timestamps: List[float] = [float(t) for t in timestamps]
        self.marker_observations: List[Dict[str, np.ndarray]] = deep_copy_marker_observations(marker_observations)
        self.source_path: Optional[str] = None

    @staticmethod
    def load_trc(trc_file_path: str) -> 'MarkerTrajectory':
        """
        Load a .trc marker file. Missing files are fatal before any optimization begins.
        """
        if not os.path.exists(trc_file_path):
            raise PathError(f'Marker trajectory {trc_file_path} does not exist.')
        import nimblephysics as nimble
        trc_file: nimble.biomechanics.OpenSimTRC = nimble.biomechanics.OpenSimParser.loadTRC(trc_file_path)
        # Copy the observations out of the PyBind structures before working with them
        trajectory = MarkerTrajectory(trc_file.timestamps, trc_file.markerTimesteps)
        trajectory.source_path = trc_file_path
        trajectory.validate()
        return trajectory

    def validate(self):
        if len(self.marker_observations) == 0:
            raise TrajectoryError('No marker data frames found.')
        any_have_markers = False
        for t in range(len(self.marker_observations)):
            for marker in self.marker_observations[t]:
                any_have_markers = True
                position = self.marker_observations[t][marker]
                if np.any(np.isnan(position)):
                    raise TrajectoryError(f'Frame {t} has NaNs for marker {marker}.')
                if np.any(np.abs(position) > 1e6):
                    raise TrajectoryError(f'Frame {t} has suspiciously large values ({position}) for marker '
                                          f'{marker}.')
        if not any_have_markers:
            raise TrajectoryError('No markers are observed on any frame.')

    def num_frames(self) -> int:
        return len(self.timestamps)

    def marker_names(self) -> List[str]:
        names = set()
        for marker_timestep in self.marker_observations:
            names.update(marker_timestep.keys())
        return sorted(names)

    def time_range(self) -> Tuple[float, float]:
        return self.timestamps[0], self.timestamps[-1]

    def trimmed(self, start_time: float, end_time: float) -> 'MarkerTrajectory':
        """Frames whose timestamp falls inside [start_time, end_time]."""
        keep = [i for i, t in enumerate(self.timestamps) if start_time - 1e-9 <= t <= end_time + 1e-9]
        trimmed = MarkerTrajectory([self.timestamps[i] for i in keep],
                                   [self.marker_observations[i] for i in keep])
        trimmed.source_path = self.source_path
        return trimmed

    def __len__(self):
        return self.num_frames()
