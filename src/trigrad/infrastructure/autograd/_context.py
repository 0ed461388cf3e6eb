from typing import Any, Sequence
from dataclasses import dataclass, field

from ...domain._node import INode
from ...domain._ops import OpKind


@dataclass
class Context:
    """
    Backward context attached to a node produced by an operation.

    A `Context` is a tagged record: ``op`` selects the derivative rule and
    ``saved_meta`` carries the little extra information some rules need.
    Backends dispatch on ``op`` in a single ``match`` statement instead of
    storing a closure per node.

    Attributes
    ----------
    op : OpKind
        Operation that produced the node.
    parents : Sequence[INode]
        Operands in call order. The same node appears twice when an operation
        was applied to a node and itself.
    saved_meta : dict[str, Any]
        Non-node metadata required for backward (for ``SUM``: ``in_shape``
        and ``axis``).
    """

    op: OpKind
    parents: Sequence["INode"]
    saved_meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.parents) != self.op.arity:
            raise ValueError(
                f"{self.op.value} expects {self.op.arity} parent(s), "
                f"got {len(self.parents)}"
            )

    @property
    def is_aliased(self) -> bool:
        """True when both operands of a binary op are the same node."""
        return len(self.parents) == 2 and self.parents[0] is self.parents[1]
