"""
Graph scheduling for reverse-mode differentiation.

The scheduler knows nothing about values, shapes or backends. It orders the
nodes reachable from a root so that every node comes after all of its parents,
seeds the root, and then hands nodes to a backend-provided ``step`` callable
in reverse order. Because a node's step only runs after every descendant's
step has finished, each node's gradient is complete by the time it is
propagated further.

Both variants are strictly sequential. The async variant awaits each step
before starting the next, so GPU steps never overlap.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

N = TypeVar("N")


def _default_parents(node) -> Iterable:
    return node.parents


def topological_sort(
    root: N, parents_of: Callable[[N], Iterable[N]] = _default_parents
) -> list[N]:
    """
    Return the nodes reachable from `root` in topological order.

    Post-order depth-first traversal over the parent relation: a node is
    appended only after all of its parents, and each node appears once even
    when it is reached through several edges (tracked by identity). The root
    is always last.

    Parameters
    ----------
    root : N
        Node to start from.
    parents_of : Callable[[N], Iterable[N]]
        Returns the parents of a node. Defaults to ``node.parents``.

    Returns
    -------
    list[N]
        Parents before children.
    """
    order: list[N] = []
    visited: set[int] = set()
    # Each frame holds a node and an iterator over its not-yet-visited parents.
    stack = [(root, iter(parents_of(root)))]
    visited.add(id(root))

    while stack:
        node, parents = stack[-1]
        for parent in parents:
            if id(parent) not in visited:
                visited.add(id(parent))
                stack.append((parent, iter(parents_of(parent))))
                break
        else:
            stack.pop()
            order.append(node)

    return order


def run_backward(
    root: N,
    *,
    seed: Callable[[N], None],
    step: Callable[[N], None],
    parents_of: Callable[[N], Iterable[N]] = _default_parents,
) -> None:
    """
    Seed `root` and run `step` on every reachable node, children first.

    Parameters
    ----------
    root : N
        Terminal node of the graph.
    seed : Callable[[N], None]
        Sets the root's gradient to ones.
    step : Callable[[N], None]
        Propagates a node's gradient into its parents. Called once per node.
    parents_of : Callable[[N], Iterable[N]]
        Parent relation used for ordering.
    """
    seed(root)
    order = topological_sort(root, parents_of)
    logger.debug("backward over %d node(s)", len(order))
    for node in reversed(order):
        step(node)


async def run_backward_async(
    root: N,
    *,
    seed: Callable[[N], None],
    step: Callable[[N], Awaitable[None]],
    parents_of: Callable[[N], Iterable[N]] = _default_parents,
) -> None:
    """Awaiting counterpart of :func:`run_backward` for asynchronous backends."""
    seed(root)
    order = topological_sort(root, parents_of)
    logger.debug("async backward over %d node(s)", len(order))
    for node in reversed(order):
        await step(node)
