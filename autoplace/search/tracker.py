from typing import Dict, TextIO, List, Optional
from autoplace.parameters import Parameter, ParameterSpace


class ConvergenceTracker:
    """
    Writes the human-readable audit trail of a run, one line per (pass, parameter), and owns the termination
    predicate. The log handle is owned by the caller; the tracker only appends to it.
    """

    def __init__(self, log: TextIO):
        self.log = log
        self.records: List[Dict] = []

    def _write(self, line: str):
        self.log.write(line + '\n')
        self.log.flush()

    def start_run(self, label: str, space: ParameterSpace, baseline_cost: float):
        self._write(f'=== {label}: {len(space.free_parameters())} free of {len(space)} parameters, '
                    f'baseline cost {baseline_cost:.6f}')
        for parameter in space.enumerate():
            self._write(f'    {parameter.token:<32} {space.classify(parameter).name}')

    def record(self, pass_index: int, parameter: Parameter, before: float, after: float, cost: float,
               movement: Optional[float] = None):
        if movement is None:
            movement = (after - before) * parameter.scale
        self.records.append({
            'pass': pass_index,
            'parameter': parameter,
            'before': before,
            'after': after,
            'movement': movement,
            'cost': cost,
        })
        self._write(f'pass {pass_index:3d} | {parameter.token:<32} | before {before:+.6f} | after {after:+.6f} | '
                    f'movement {movement:+8.3f} {parameter.units} | cost {cost:.6f}')

    def end_pass(self, pass_index: int, movements: Dict[Parameter, float], cost: float, converged: bool):
        largest = max([abs(m) for m in movements.values()], default=0.0)
        self._write(f'pass {pass_index:3d} done | largest movement {largest:.3f} | cost {cost:.6f} | '
                    f'{"converged" if converged else "not converged"}')

    def finish(self, status: str, iterations: int, final_cost: float):
        self._write(f'=== finished: {status} after {iterations} passes, final cost {final_cost:.6f}')

    @staticmethod
    def is_converged(pass_movements: Dict[Parameter, float], threshold: float) -> bool:
        # Strictly below the threshold; a pass with no free parameters is trivially converged.
        return all(abs(movement) < threshold for movement in pass_movements.values())
