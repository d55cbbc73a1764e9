from autoplace.search.result import SearchResult, SearchStatus, IterationState
from autoplace.search.tracker import ConvergenceTracker
from autoplace.search.context import SearchContext, SearchInterrupted
from autoplace.search.engine import SearchEngine, coarse_marker_search
