import math
from typing import List, Dict
from autoplace.ik.abstract_solver import AbstractIKSolver, FrameResult, IKResult
from autoplace.exceptions import IKSolveFailure
from autoplace.ik.ik_setup import IKSetup
from autoplace.models.abstract_model import AbstractModel
from autoplace.trajectory import MarkerTrajectory


class OpenSimIKSolver(AbstractIKSolver):
    """
    Runs OpenSim's InverseKinematicsSolver over the experimental frames. Each solve writes the candidate model to
    the worker .osim, reloads it, tracks every frame, and writes the resulting coordinates to the worker motion
    file. The worker files are shared between calls, so trials run one at a time under the run's worker lock.
    """
    def __init__(self, setup: IKSetup, worker_model_path: str, worker_motion_path: str):
        super().__init__()
        self.setup = setup
        self.worker_model_path = worker_model_path
        self.worker_motion_path = worker_motion_path

    def tracked_marker_names(self, model: AbstractModel, trajectory: MarkerTrajectory) -> List[str]:
        names = [name for name in trajectory.marker_names() if model.has_marker(name)]
        if len(self.setup.marker_weights) > 0:
            names = [name for name in names if self.setup.marker_weights.get(name, 0.0) > 0.0]
        return names

    def solve(self, model: AbstractModel, trajectory: MarkerTrajectory) -> IKResult:
        import opensim as osim

        if not (math.isinf(self.setup.start_time) and math.isinf(self.setup.end_time)):
            trajectory = trajectory.trimmed(self.setup.start_time, self.setup.end_time)

        # 1. Write the candidate placement to the worker model and load it back
        model.save(self.worker_model_path)
        osim_model = osim.Model(self.worker_model_path)
        state = osim_model.initSystem()
        coordinates = osim_model.getCoordinateSet()
        coordinate_names: List[str] = [coordinates.get(i).getName() for i in range(coordinates.getSize())]

        # 2. Build the marker tracking problem
        marker_weights = osim.SetMarkerWeights()
        for name, weight in self.setup.marker_weights.items():
            marker_weights.cloneAndAppend(osim.MarkerWeight(name, weight))
        markers_reference = osim.MarkersReference(self.setup.marker_file, marker_weights)
        coordinate_references = osim.SimTKArrayCoordinateReference()
        solver = osim.InverseKinematicsSolver(osim_model, markers_reference, coordinate_references,
                                              self.setup.constraint_weight)
        solver.setAccuracy(self.setup.accuracy)

        # 3. Track each frame. A frame that fails is scored with the sentinel residual and the next frame
        # re-assembles from scratch.
        tracked_markers = self.tracked_marker_names(model, trajectory)
        frames: List[FrameResult] = []
        assembled = False
        for timestamp in trajectory.timestamps:
            state.setTime(timestamp)
            try:
                if not assembled:
                    solver.assemble(state)
                    assembled = True
                else:
                    solver.track(state)
            except RuntimeError as e:
                print(f'IK failed to converge at t={timestamp:.4f}: {e}', flush=True)
                frames.append(FrameResult.failed(timestamp, tracked_markers, IKSolveFailure(str(e))))
                assembled = False
                continue
            residuals: Dict[str, float] = {}
            for i in range(solver.getNumMarkersInUse()):
                residuals[solver.getMarkerNameForIndex(i)] = solver.computeCurrentMarkerError(i)
            joint_angles: Dict[str, float] = {}
            for i in range(coordinates.getSize()):
                joint_angles[coordinate_names[i]] = coordinates.get(i).getValue(state)
            frames.append(FrameResult(timestamp, joint_angles, residuals))

        # 4. Write the worker motion file
        self.write_motion(frames, coordinate_names, self.worker_motion_path)
        return IKResult(frames)

    @staticmethod
    def write_motion(frames: List[FrameResult], coordinate_names: List[str], path: str):
        import opensim as osim
        table = osim.TimeSeriesTable()
        labels = osim.StdVectorString()
        for name in coordinate_names:
            labels.append(name)
        table.setColumnLabels(labels)
        for frame in frames:
            if not frame.converged:
                continue
            row = osim.RowVector(len(coordinate_names), 0.0)
            for j, name in enumerate(coordinate_names):
                row[j] = frame.joint_angles[name]
            table.appendRow(frame.timestamp, row)
        table.addTableMetaDataString('inDegrees', 'no')
        sto = osim.STOFileAdapter()
        sto.write(table, path)
