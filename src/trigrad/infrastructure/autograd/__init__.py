from ._context import Context
from ._graph import run_backward, run_backward_async, topological_sort

__all__ = [
    Context.__name__,
    run_backward.__name__,
    run_backward_async.__name__,
    topological_sort.__name__,
]
