import enum
from dataclasses import dataclass, field
from typing import List, Dict, Tuple, Any
from autoplace.parameters import Parameter
from autoplace.exceptions import ConvergenceNotReached


class SearchStatus(enum.Enum):
    CONVERGED = 0
    CAP_EXCEEDED = 1
    CANCELLED = 2
    TIMED_OUT = 3


@dataclass
class IterationState:
    """Mutable bookkeeping for a single run. Reset at the start of every run."""
    iteration: int = 0
    movements: Dict[Parameter, float] = field(default_factory=dict)
    cost_history: List[float] = field(default_factory=list)
    movement_history: List[Dict[Parameter, float]] = field(default_factory=list)

    def reset(self):
        self.iteration = 0
        self.movements = {}
        self.cost_history = []
        self.movement_history = []

    def start_pass(self):
        self.iteration += 1
        self.movements = {}

    def finish_pass(self, cost: float):
        self.cost_history.append(cost)
        self.movement_history.append(dict(self.movements))


@dataclass(frozen=True)
class SearchResult:
    parameters: Tuple[Parameter, ...]
    values: Tuple[float, ...]
    status: SearchStatus
    iterations: int
    final_cost: float
    cost_history: Tuple[float, ...]
    movement_history: Tuple[Tuple[Tuple[Parameter, float], ...], ...]

    @property
    def converged(self) -> bool:
        return self.status == SearchStatus.CONVERGED

    def value_of(self, parameter: Parameter) -> float:
        return self.values[self.parameters.index(parameter)]

    def raise_for_status(self):
        if self.status == SearchStatus.CAP_EXCEEDED:
            raise ConvergenceNotReached(f'Stopped after {self.iterations} passes with cost {self.final_cost:.4f}.')

    def as_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.name,
            'converged': self.converged,
            'iterations': self.iterations,
            'finalCost': self.final_cost,
            'costHistory': list(self.cost_history),
            'parameters': [
                {'kind': p.kind.name, 'entity': p.entity, 'axis': p.axis.name, 'value': v}
                for p, v in zip(self.parameters, self.values)
            ],
            'movements': [
                {p.token: m for p, m in movements} for movements in self.movement_history
            ],
        }
