"""
Finite operation set shared by every node type and backend.

Every non-leaf node records which of these operations produced it. The tag,
together with a small amount of saved metadata, is all a backend needs to
recompute the local derivative during the backward pass.
"""

from enum import Enum


class OpKind(Enum):
    """
    Tag identifying the operation that produced a node.

    The enum value doubles as the diagnostic ``op`` string shown on nodes.
    """

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    POW = "pow"
    NEG = "neg"
    EXP = "exp"
    TANH = "tanh"
    SUM = "sum"

    @property
    def arity(self) -> int:
        """Number of parents a node produced by this operation has."""
        return 2 if self in BINARY_OPS else 1


BINARY_OPS = frozenset(
    {OpKind.ADD, OpKind.SUB, OpKind.MUL, OpKind.DIV, OpKind.POW}
)
"""Operations taking two operands."""

UNARY_OPS = frozenset({OpKind.NEG, OpKind.EXP, OpKind.TANH})
"""Elementwise operations taking a single operand."""
