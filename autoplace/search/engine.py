"""
engine.py
---------
Description: The coordinate search that places markers and joints. One pass sweeps every free parameter in a
             fixed order. Each parameter gets a shrinking-step line search in both directions, with an IK solve
             and a cost evaluation per candidate. Accepted values are visible to every later parameter (sequential,
             Gauss-Seidel style updates). The run stops when a full pass moves nothing by more than the threshold,
             or when it hits the pass cap, a cancellation or its wall-clock budget.
"""
import os
import math
import threading
from typing import List, Dict, Tuple, Optional
from autoplace.config import OptimizationConfig
from autoplace.cost import CostEvaluator
from autoplace.exceptions import ParameterOutOfBounds, PathError
from autoplace.helpers import require_files, log_file_name, run_timestamp
from autoplace.ik.abstract_solver import AbstractIKSolver, IKResult
from autoplace.models.abstract_model import AbstractModel
from autoplace.parameters import Parameter, ParameterSpace
from autoplace.search.context import SearchContext, SearchInterrupted
from autoplace.search.result import SearchResult, SearchStatus
from autoplace.search.tracker import ConvergenceTracker
from autoplace.trajectory import MarkerTrajectory


class SearchEngine:
    def __init__(self,
                 config: OptimizationConfig,
                 model: AbstractModel,
                 solver: AbstractIKSolver,
                 trajectory: MarkerTrajectory):
        self.config = config
        self.model = model
        self.solver = solver
        self.trajectory = trajectory
        self.evaluator = CostEvaluator(config)

        # Everything below can fail on a bad configuration, and all of it happens before the first IK solve.
        trajectory.validate()
        self.space = ParameterSpace(config, model)
        self.evaluator.validate(model, trajectory.num_frames())
        self.free_parameters: List[Parameter] = self.space.free_parameters()
        self.initial_values: Dict[Parameter, float] = {p: model.get(p) for p in self.space.enumerate()}
        for parameter in self.free_parameters:
            start = self.initial_values[parameter]
            limit = config.excursion_limit(parameter)
            model.declare_limits(parameter, start - limit, start + limit)

        self.current_cost: float = math.inf
        self.last_ik_result: Optional[IKResult] = None

    def _solve(self, context: SearchContext) -> float:
        with context.worker_lock:
            self.last_ik_result = self.solver.solve(self.model, self.trajectory)
        return self.evaluator.score(self.last_ik_result)

    def _trial(self, context: SearchContext, parameter: Parameter, value: float, restore_value: float) -> Optional[float]:
        """Cost of the model with one parameter moved to `value`, or None if the value is out of bounds."""
        context.checkpoint()
        # The worker files are written and read back inside the lock, so no other trial can interleave.
        with context.worker_lock:
            try:
                self.model.set(parameter, value)
            except ParameterOutOfBounds:
                return None
            try:
                ik_result = self.solver.solve(self.model, self.trajectory)
            finally:
                self.model.set(parameter, restore_value)
        return self.evaluator.score(ik_result)

    def _improves(self, cost: float, best_cost: float) -> bool:
        return cost < best_cost - self.config.min_improvement

    def search_parameter(self, context: SearchContext, parameter: Parameter, current_cost: float) -> Tuple[float, float, float]:
        """
        Line-search one parameter. Returns the accepted value, its cost, and the signed movement in reporting
        units (the sum of the accepted steps, so a one unit step is recorded as exactly one unit).
        """
        best_value = self.model.get(parameter)
        best_cost = current_cost
        movement = 0.0
        for step in self.config.step_sizes():
            delta = step / parameter.scale

            # Try both directions around the current value
            candidates: List[Tuple[float, int, float]] = []
            for direction in [1, -1]:
                value = best_value + direction * delta
                cost = self._trial(context, parameter, value, best_value)
                if cost is not None:
                    candidates.append((cost, direction, value))
            if len(candidates) == 0:
                continue
            cost, direction, value = min(candidates, key=lambda c: c[0])
            if not self._improves(cost, best_cost):
                continue
            best_value, best_cost = value, cost
            movement += direction * step
            self.model.set(parameter, best_value)

            # Keep walking the same way while it keeps helping
            for _ in range(self.config.max_line_steps):
                value = best_value + direction * delta
                cost = self._trial(context, parameter, value, best_value)
                if cost is None or not self._improves(cost, best_cost):
                    break
                best_value, best_cost = value, cost
                movement += direction * step
                self.model.set(parameter, best_value)
        return best_value, best_cost, movement

    def run(self, context: SearchContext) -> SearchResult:
        tracker: ConvergenceTracker = context.tracker
        state = context.state
        context.start()
        self.current_cost = math.inf
        status = SearchStatus.CAP_EXCEEDED
        print(f'Starting marker search "{self.config.label}": {len(self.free_parameters)} free parameters, '
              f'{self.trajectory.num_frames()} frames', flush=True)
        try:
            context.checkpoint()
            self.current_cost = self._solve(context)
            state.cost_history.append(self.current_cost)
            tracker.start_run(self.config.label, self.space, self.current_cost)
            print(f'Baseline cost: {self.current_cost:.4f}', flush=True)

            while True:
                context.checkpoint()
                state.start_pass()
                for parameter in self.free_parameters:
                    before = self.model.get(parameter)
                    after, self.current_cost, movement = self.search_parameter(context, parameter, self.current_cost)
                    state.movements[parameter] = movement
                    tracker.record(state.iteration, parameter, before, after, self.current_cost, movement)

                converged = tracker.is_converged(state.movements, self.config.conv_thresh_mm)
                state.finish_pass(self.current_cost)
                tracker.end_pass(state.iteration, state.movements, self.current_cost, converged)
                print(f'Pass {state.iteration}: cost {self.current_cost:.4f}'
                      f'{" (converged)" if converged else ""}', flush=True)
                if converged:
                    status = SearchStatus.CONVERGED
                    break
                if state.iteration >= self.config.max_passes:
                    print(f'Reached the cap of {self.config.max_passes} passes without converging', flush=True)
                    status = SearchStatus.CAP_EXCEEDED
                    break
        except SearchInterrupted as e:
            status = e.status
            print(f'Marker search interrupted ({status.name}) during pass {state.iteration}', flush=True)

        final_cost = self.current_cost
        if status in [SearchStatus.CONVERGED, SearchStatus.CAP_EXCEEDED]:
            # Re-solve with the accepted values, so the worker motion matches the returned parameters
            final_cost = self._solve(context)
        tracker.finish(status.name, state.iteration, final_cost)

        parameters = tuple(self.space.enumerate())
        return SearchResult(
            parameters=parameters,
            values=tuple(self.model.get(p) for p in parameters),
            status=status,
            iterations=state.iteration,
            final_cost=final_cost,
            cost_history=tuple(state.cost_history),
            movement_history=tuple(
                tuple((p, movements[p]) for p in self.free_parameters if p in movements)
                for movements in state.movement_history),
        )


def coarse_marker_search(config: OptimizationConfig,
                         log_path: Optional[str] = None,
                         cancel_event: Optional[threading.Event] = None) -> Tuple[SearchResult, AbstractModel]:
    """
    Load the model, IK setup and marker trajectory named by the config, run the search against OpenSim, and return
    the result along with the placed model (still in memory; persisting it is up to the caller).
    """
    from autoplace.ik.ik_setup import IKSetup
    from autoplace.ik.opensim_solver import OpenSimIKSolver
    from autoplace.models.opensim_model import load_model

    missing = require_files([config.model_path, config.ik_setup_path])
    if len(missing) > 0:
        raise PathError('Missing required input file(s): ' + ', '.join(missing))

    setup = IKSetup.load(config.ik_setup_path)
    setup.retarget(model_file=config.worker_model_path,
                   marker_file=config.marker_file,
                   output_motion_file=config.worker_motion_path)
    # Keep a copy of the setup the worker files are solved with, so a trial can be replayed in the OpenSim GUI
    setup.write(os.path.splitext(config.worker_model_path)[0] + '_Setup_IK.xml')
    trajectory = MarkerTrajectory.load_trc(setup.marker_file)
    if not (math.isinf(setup.start_time) and math.isinf(setup.end_time)):
        trajectory = trajectory.trimmed(setup.start_time, setup.end_time)
    model = load_model(config.model_path)
    solver = OpenSimIKSolver(setup, config.worker_model_path, config.worker_motion_path)
    engine = SearchEngine(config, model, solver, trajectory)

    if log_path is None:
        log_path = os.path.join(config.log_dir, log_file_name(config.label, run_timestamp()))
    with SearchContext(log_path, cancel_event, config.max_wall_time_s) as context:
        result = engine.run(context)
    return result, model
