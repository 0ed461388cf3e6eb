"""
Reference (CPU) backward step.

`backward_step` receives one node at a time from the graph scheduler and
accumulates that node's gradient into its parents according to the tag stored
in the node's context. Accumulation is always ``+=`` on the parents' own
buffers, in operand order, so a node used as both operands receives both
contributions.
"""

from __future__ import annotations

import numpy as np

from ...domain._ops import OpKind
from .reduce_cpu import sum_backward_cpu


def seed_ones(node) -> None:
    node._gradient = np.ones(node.size, dtype=np.float32)


def backward_step(node) -> None:
    ctx = node.ctx
    if ctx is None:
        return
    g = node.gradient

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        match ctx.op:
            case OpKind.ADD:
                a, b = ctx.parents
                a._gradient += g
                b._gradient += g
            case OpKind.SUB:
                a, b = ctx.parents
                a._gradient += g
                b._gradient -= g
            case OpKind.MUL:
                a, b = ctx.parents
                a._gradient += b.values * g
                b._gradient += a.values * g
            case OpKind.DIV:
                a, b = ctx.parents
                a._gradient += g / b.values
                b._gradient += -a.values / (b.values * b.values) * g
            case OpKind.POW:
                a, b = ctx.parents
                da = b.values * np.power(a.values, b.values - np.float32(1.0))
                db = np.log(a.values) * np.power(a.values, b.values)
                a._gradient += da * g
                b._gradient += db * g
            case OpKind.NEG:
                (a,) = ctx.parents
                a._gradient -= g
            case OpKind.EXP:
                (a,) = ctx.parents
                a._gradient += np.exp(a.values) * g
            case OpKind.TANH:
                (a,) = ctx.parents
                t = np.tanh(a.values)
                a._gradient += (np.float32(1.0) - t * t) * g
            case OpKind.SUM:
                (a,) = ctx.parents
                sum_backward_cpu(
                    a._gradient,
                    g,
                    ctx.saved_meta["in_shape"],
                    ctx.saved_meta["axis"],
                )
            case _:
                raise NotImplementedError(f"No CPU backward rule for {ctx.op}")
