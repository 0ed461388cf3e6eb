"""
GPU (wgpu) kernels with Tensor boundaries.

Every function here is a coroutine. Values live host-side on every tensor;
each call uploads the operands, dispatches the kernel on the tensor's
`WgpuDeviceContext`, and awaits the staged results.

Backward steps do not mutate gradients on the device. The kernels return
updated gradient buffers, which replace the parents' host gradients once the
readback has completed.
"""

from __future__ import annotations

import numpy as np

from ...domain._ops import OpKind, BINARY_OPS, UNARY_OPS
from ..utils._indexing import total_length
from ..wgpu._shaders import (
    binary_backward_spec,
    binary_forward_spec,
    sum_arena_words,
    sum_backward_spec,
    sum_forward_spec,
    unary_backward_spec,
    unary_forward_spec,
)


def _elementwise_params(n: int, is_same: bool = False) -> np.ndarray:
    return np.array([n, int(is_same), 0, 0], dtype=np.uint32)


def _sum_params(shape, axis: int) -> np.ndarray:
    n_in = total_length(shape)
    return np.array([len(shape), axis, n_in // shape[axis], n_in], dtype=np.uint32)


async def binary_forward(op: OpKind, a, b) -> np.ndarray:
    if op not in BINARY_OPS:
        raise ValueError(f"{op} is not a binary op")
    (out,) = await a.gpu_context.run(
        binary_forward_spec(op),
        invocations=a.size,
        inputs=[a.values, b.values, _elementwise_params(a.size)],
        output_lengths=[a.size],
    )
    return out


async def unary_forward(op: OpKind, x) -> np.ndarray:
    if op not in UNARY_OPS:
        raise ValueError(f"{op} is not a unary op")
    (out,) = await x.gpu_context.run(
        unary_forward_spec(op),
        invocations=x.size,
        inputs=[x.values, _elementwise_params(x.size)],
        output_lengths=[x.size],
    )
    return out


async def sum_forward(x, axis: int) -> np.ndarray:
    """
    Sum `x` along `axis` on the GPU.

    One invocation per output element, each with its own arena slice.
    """
    out_len = x.size // x.shape[axis]
    (out,) = await x.gpu_context.run(
        sum_forward_spec(),
        invocations=out_len,
        arena_words=[out_len * sum_arena_words(len(x.shape))],
        inputs=[
            _sum_params(x.shape, axis),
            np.asarray(x.shape, dtype=np.uint32),
            x.values,
        ],
        output_lengths=[out_len],
    )
    return out


async def backward_step(node) -> None:
    """
    Accumulate `node`'s gradient into its parents on the GPU.

    For aliased binary operands the kernel is told both positions refer to
    one tensor and returns the combined gradient in both outputs.
    """
    ctx = node.ctx
    if ctx is None:
        return
    gpu = node.gpu_context
    g = node.gradient

    match ctx.op:
        case OpKind.ADD | OpKind.SUB | OpKind.MUL | OpKind.DIV | OpKind.POW:
            a, b = ctx.parents
            new_a, new_b = await gpu.run(
                binary_backward_spec(ctx.op),
                invocations=node.size,
                inputs=[
                    a.values,
                    b.values,
                    a.gradient,
                    b.gradient,
                    g,
                    _elementwise_params(node.size, ctx.is_aliased),
                ],
                output_lengths=[node.size, node.size],
            )
            a._gradient = new_a
            b._gradient = new_b
        case OpKind.NEG | OpKind.EXP | OpKind.TANH:
            (a,) = ctx.parents
            (new_a,) = await gpu.run(
                unary_backward_spec(ctx.op),
                invocations=node.size,
                inputs=[a.values, a.gradient, g, _elementwise_params(node.size)],
                output_lengths=[node.size],
            )
            a._gradient = new_a
        case OpKind.SUM:
            (a,) = ctx.parents
            shape = ctx.saved_meta["in_shape"]
            (new_a,) = await gpu.run(
                sum_backward_spec(),
                invocations=a.size,
                arena_words=[a.size * sum_arena_words(len(shape))],
                inputs=[
                    _sum_params(shape, ctx.saved_meta["axis"]),
                    np.asarray(shape, dtype=np.uint32),
                    a.gradient,
                    g,
                ],
                output_lengths=[a.size],
            )
            a._gradient = new_a
        case _:
            raise NotImplementedError(f"No wgpu backward rule for {ctx.op}")
