import os
import time
import threading
from typing import Optional, TextIO
from autoplace.search.result import IterationState, SearchStatus
from autoplace.search.tracker import ConvergenceTracker


class SearchInterrupted(Exception):
    """Unwinds a run when the caller cancels it or its wall-clock budget runs out."""
    def __init__(self, status: SearchStatus):
        super().__init__(status.name)
        self.status = status


class SearchContext:
    """
    Everything a run shares across trials: the audit log handle, the lock serializing access to the worker
    model / motion files, the cancellation signal, the deadline and the iteration state. Use it as a context
    manager; the log is closed on every exit path.
    """

    def __init__(self,
                 log_path: str,
                 cancel_event: Optional[threading.Event] = None,
                 max_wall_time_s: Optional[float] = None):
        self.log_path = log_path
        self.cancel_event = cancel_event
        self.max_wall_time_s = max_wall_time_s
        self.worker_lock = threading.Lock()
        self.state = IterationState()
        self.log: Optional[TextIO] = None
        self.tracker: Optional[ConvergenceTracker] = None
        self.deadline: Optional[float] = None

    def __enter__(self) -> 'SearchContext':
        log_dir = os.path.dirname(self.log_path)
        if log_dir != '' and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        self.log = open(self.log_path, 'a')
        self.tracker = ConvergenceTracker(self.log)
        return self

    def __exit__(self, exc_type, exc_value, tb):
        if self.log is not None:
            self.log.close()
            self.log = None
        return False

    def start(self):
        self.state.reset()
        if self.max_wall_time_s is not None:
            self.deadline = time.monotonic() + self.max_wall_time_s

    def checkpoint(self):
        """Called between trials and between passes."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SearchInterrupted(SearchStatus.CANCELLED)
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise SearchInterrupted(SearchStatus.TIMED_OUT)
