"""
Native (ctypes) kernels with Tensor boundaries.

This module is the translation shim between tensors on the ``"native"``
device and the precompiled kernel module:

- forward functions take tensors, allocate a float32 output buffer, and let
  the kernel fill it; the caller wraps the buffer into a new node
- `backward_step` hands a node's gradient and its parents' buffers to the
  matching backward kernel, which accumulates into the parents in place

Any failure to load the library or a non-zero kernel status is reported as
`BackendError`. Validation of shapes and devices happens before these
functions are called, so a failure here never leaves a half-built node.
"""

from __future__ import annotations

import ctypes

import numpy as np

from ...domain._errors import BackendError
from ...domain._ops import OpKind, BINARY_OPS, UNARY_OPS
from ..native.python._native_loader import load_trigrad_native
from ..native.python.elementwise_ctypes import (
    binary_backward_f32_ctypes,
    binary_forward_f32_ctypes,
    unary_backward_f32_ctypes,
    unary_forward_f32_ctypes,
)
from ..native.python.reduce_ctypes import (
    sum_backward_f32_ctypes,
    sum_forward_f32_ctypes,
)

_DEVICE = "native"


def _get_lib() -> ctypes.CDLL:
    """
    Return the process-wide cached native library handle.

    Raises
    ------
    BackendError
        If the library cannot be located or loaded.
    """
    try:
        return load_trigrad_native()
    except OSError as e:
        raise BackendError("load", _DEVICE, str(e)) from e


def _call(op_name: str, fn, *args, **kwargs) -> None:
    lib = _get_lib()
    try:
        fn(lib, *args, **kwargs)
    except (RuntimeError, AttributeError) as e:
        raise BackendError(op_name, _DEVICE, str(e)) from e


def binary_forward(op: OpKind, a, b) -> np.ndarray:
    """
    Run a binary forward kernel on two native tensors.

    Returns
    -------
    np.ndarray
        Fresh flat float32 buffer holding ``op(a, b)``.
    """
    if op not in BINARY_OPS:
        raise ValueError(f"{op} is not a binary op")
    out = np.empty(a.size, dtype=np.float32)
    _call(op.value, binary_forward_f32_ctypes, op, a=a.values, b=b.values, out=out)
    return out


def unary_forward(op: OpKind, x) -> np.ndarray:
    """Run a unary forward kernel and return the new buffer."""
    if op not in UNARY_OPS:
        raise ValueError(f"{op} is not a unary op")
    out = np.empty(x.size, dtype=np.float32)
    _call(op.value, unary_forward_f32_ctypes, op, x=x.values, out=out)
    return out


def sum_forward(x, axis: int) -> np.ndarray:
    """Run the sum forward kernel over `axis` and return the new buffer."""
    out = np.empty(x.size // x.shape[axis], dtype=np.float32)
    _call("sum", sum_forward_f32_ctypes, x=x.values, out=out, shape=x.shape, axis=axis)
    return out


def backward_step(node) -> None:
    """
    Accumulate `node`'s gradient into its parents with the native kernels.

    Aliased operands share one gradient buffer, which is passed to the
    kernel in both gradient positions.
    """
    ctx = node.ctx
    if ctx is None:
        return
    name = f"{ctx.op.value}.backward"

    match ctx.op:
        case OpKind.ADD | OpKind.SUB | OpKind.MUL | OpKind.DIV | OpKind.POW:
            a, b = ctx.parents
            _call(
                name,
                binary_backward_f32_ctypes,
                ctx.op,
                grad_a=a._gradient,
                grad_b=b._gradient,
                grad_out=node.gradient,
                a=a.values,
                b=b.values,
            )
        case OpKind.NEG | OpKind.EXP | OpKind.TANH:
            (a,) = ctx.parents
            _call(
                name,
                unary_backward_f32_ctypes,
                ctx.op,
                grad_x=a._gradient,
                grad_out=node.gradient,
                x=a.values,
            )
        case OpKind.SUM:
            (a,) = ctx.parents
            _call(
                name,
                sum_backward_f32_ctypes,
                grad_x=a._gradient,
                grad_out=node.gradient,
                shape=ctx.saved_meta["in_shape"],
                axis=ctx.saved_meta["axis"],
            )
        case _:
            raise NotImplementedError(f"No native backward rule for {ctx.op}")
