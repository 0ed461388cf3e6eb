"""
Node interface definitions.

This module defines the domain-level contract shared by every value that can
take part in a computation graph: scalars and tensors on any backend. The
graph scheduler only depends on this protocol, never on a concrete class.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class INode(Protocol):
    """
    Autodiff node interface.

    A node holds a value, a gradient of the same shape, and the parents it
    was computed from. Leaves have no parents.

    Notes
    -----
    - ``op`` and ``label`` are diagnostic metadata and have no effect on
      evaluation.
    - ``ctx`` is ``None`` for leaves and a backward context for nodes
      produced by an operation.
    """

    @property
    def parents(self) -> Sequence["INode"]:
        """
        Return the nodes this node was derived from.

        Returns
        -------
        Sequence[INode]
            Zero, one or two parents, in operand order.
        """
        ...

    @property
    def ctx(self) -> Optional[Any]:
        """Backward context, or None for leaves."""
        ...

    @property
    def op(self) -> str:
        """Name of the producing operation, or an empty string for leaves."""
        ...

    @property
    def label(self) -> str:
        """User supplied diagnostic label."""
        ...

    def zero_grad(self) -> None:
        """Reset the accumulated gradient to zero."""
        ...

    def backward(self) -> Any:
        """
        Run reverse-mode differentiation from this node.

        Seeds this node's gradient to ones, then accumulates contributions
        into every reachable ancestor. On asynchronous backends the return
        value is awaitable.
        """
        ...
