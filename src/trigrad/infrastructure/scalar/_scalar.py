"""
Single-value autodiff node.

`Scalar` is the smallest complete node type: it carries one float value and
one float gradient and supports the full elementwise operation set. Its
derivative rules are the reference every tensor backend is checked against.

Arithmetic follows IEEE-754 double semantics: division by zero yields an
infinity and the logarithm of a non-positive base in the ``pow`` derivative
yields NaN or -inf, which is propagated rather than raised.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Union

import numpy as np

from ...domain._ops import OpKind
from ..autograd._context import Context
from ..autograd._graph import run_backward

Number = Union[int, float]


def _ieee(fn, *args: float) -> float:
    with np.errstate(all="ignore"):
        return float(fn(*(np.float64(a) for a in args)))


class Scalar:
    """
    Scalar node participating in a computation graph.

    Parameters
    ----------
    value : float
        Forward value.
    label : str, optional
        Diagnostic label shown by ``str()``.
    ctx : Optional[Context], optional
        Backward context. Set by operations; leaves have none.

    Notes
    -----
    Bare numbers passed as operands are promoted to parentless leaves, so the
    gradient they receive is simply discarded with them.
    """

    def __init__(
        self, value: Number = 0.0, *, label: str = "", ctx: Optional[Context] = None
    ) -> None:
        self.value = float(value)
        self.gradient = 0.0
        self.label = label
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Node interface
    # ------------------------------------------------------------------
    @property
    def ctx(self) -> Optional[Context]:
        return self._ctx

    @property
    def parents(self) -> Sequence["Scalar"]:
        return tuple(self._ctx.parents) if self._ctx is not None else ()

    @property
    def op(self) -> str:
        return self._ctx.op.value if self._ctx is not None else ""

    def zero_grad(self) -> None:
        self.gradient = 0.0

    def backward(self) -> None:
        """
        Backpropagate from this node.

        Seeds this node's gradient to 1 and accumulates derivative
        contributions into every ancestor. Gradients of interior nodes are
        not reset first, so calling this twice accumulates twice.
        """
        run_backward(self, seed=_seed_one, step=_scalar_backward_step)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    @staticmethod
    def _lift(other: Union["Scalar", Number]) -> "Scalar":
        return other if isinstance(other, Scalar) else Scalar(other)

    def _binary(self, op: OpKind, other: Union["Scalar", Number], value: float):
        return Scalar(value, ctx=Context(op, (self, other)))

    def add(self, other: Union["Scalar", Number]) -> "Scalar":
        other = self._lift(other)
        return self._binary(OpKind.ADD, other, _ieee(np.add, self.value, other.value))

    def sub(self, other: Union["Scalar", Number]) -> "Scalar":
        other = self._lift(other)
        return self._binary(
            OpKind.SUB, other, _ieee(np.subtract, self.value, other.value)
        )

    def mul(self, other: Union["Scalar", Number]) -> "Scalar":
        other = self._lift(other)
        return self._binary(
            OpKind.MUL, other, _ieee(np.multiply, self.value, other.value)
        )

    def div(self, other: Union["Scalar", Number]) -> "Scalar":
        other = self._lift(other)
        return self._binary(
            OpKind.DIV, other, _ieee(np.divide, self.value, other.value)
        )

    def pow(self, other: Union["Scalar", Number]) -> "Scalar":
        other = self._lift(other)
        return self._binary(OpKind.POW, other, _ieee(np.power, self.value, other.value))

    def neg(self) -> "Scalar":
        return Scalar(-self.value, ctx=Context(OpKind.NEG, (self,)))

    def exp(self) -> "Scalar":
        return Scalar(_ieee(np.exp, self.value), ctx=Context(OpKind.EXP, (self,)))

    def tanh(self) -> "Scalar":
        return Scalar(_ieee(np.tanh, self.value), ctx=Context(OpKind.TANH, (self,)))

    # ------------------------------------------------------------------
    # Operator sugar
    # ------------------------------------------------------------------
    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return Scalar(other).add(self)

    def __sub__(self, other):
        return self.sub(other)

    def __rsub__(self, other):
        return Scalar(other).sub(self)

    def __mul__(self, other):
        return self.mul(other)

    def __rmul__(self, other):
        return Scalar(other).mul(self)

    def __truediv__(self, other):
        return self.div(other)

    def __rtruediv__(self, other):
        return Scalar(other).div(self)

    def __pow__(self, other):
        return self.pow(other)

    def __rpow__(self, other):
        return Scalar(other).pow(self)

    def __neg__(self):
        return self.neg()

    def __str__(self) -> str:
        prefix = f"{self.label}:" if self.label else ""
        # Integral values print without a trailing ".0".
        body = str(int(self.value)) if self.value.is_integer() else repr(self.value)
        return f"<{prefix}{body}>"

    def __repr__(self) -> str:
        return (
            f"Scalar(value={self.value!r}, gradient={self.gradient!r}, "
            f"op={self.op!r}, label={self.label!r})"
        )


def _seed_one(node: Scalar) -> None:
    node.gradient = 1.0


def _scalar_backward_step(node: Scalar) -> None:
    ctx = node.ctx
    if ctx is None:
        return
    g = node.gradient
    match ctx.op:
        case OpKind.ADD:
            a, b = ctx.parents
            a.gradient += g
            b.gradient += g
        case OpKind.SUB:
            a, b = ctx.parents
            a.gradient += g
            b.gradient += -g
        case OpKind.MUL:
            a, b = ctx.parents
            a.gradient += b.value * g
            b.gradient += a.value * g
        case OpKind.DIV:
            a, b = ctx.parents
            a.gradient += _ieee(np.divide, 1.0, b.value) * g
            b.gradient += _ieee(np.divide, -a.value, b.value * b.value) * g
        case OpKind.POW:
            a, b = ctx.parents
            da = b.value * _ieee(np.power, a.value, b.value - 1.0)
            db = _ieee(np.log, a.value) * _ieee(np.power, a.value, b.value)
            a.gradient += da * g
            b.gradient += db * g
        case OpKind.NEG:
            (a,) = ctx.parents
            a.gradient += -g
        case OpKind.EXP:
            (a,) = ctx.parents
            a.gradient += _ieee(np.exp, a.value) * g
        case OpKind.TANH:
            (a,) = ctx.parents
            a.gradient += (1.0 - _ieee(np.tanh, a.value) ** 2) * g
        case _:
            raise NotImplementedError(f"Scalar has no backward rule for {ctx.op}")


def as_scalars(values: Iterable[Number], *, label: str = "") -> list[Scalar]:
    """Wrap every number in `values` as a leaf Scalar."""
    return [Scalar(v, label=label) for v in values]
