"""
ctypes bindings for trigrad elementwise native kernels.

This module exposes thin Python wrappers around the float32 elementwise
kernels compiled into the shared library loaded by :func:`load_trigrad_native`.

C ABI
-----
Binary ops (add, sub, mul, div, pow)::

    int trigrad_<op>_forward_f32(const float* a, const float* b, float* out, int64_t n);
    int trigrad_<op>_backward_f32(float* grad_a, float* grad_b, const float* grad_out,
                                  const float* a, const float* b, int64_t n);

Unary ops (neg, exp, tanh)::

    int trigrad_<op>_forward_f32(const float* x, float* out, int64_t n);
    int trigrad_<op>_backward_f32(float* grad_x, const float* grad_out,
                                  const float* x, int64_t n);

All kernels return 0 on success. Forward kernels write ``out``; backward
kernels *accumulate* into the gradient buffers. When ``grad_a`` and ``grad_b``
are the same buffer, the kernel applies both contributions to it.

Design notes
------------
- Wrappers only validate dtype and contiguity, then invoke the native symbol
  with a fixed ctypes signature.
- A non-zero status is reported as ``RuntimeError`` naming the symbol; the
  Tensor-level adapter turns it into ``BackendError``.
"""

from __future__ import annotations

import ctypes
from ctypes import POINTER, c_float, c_int, c_int64

import numpy as np

from ....domain._ops import OpKind

_F32P = POINTER(c_float)

BINARY_FORWARD_ARGTYPES = [_F32P, _F32P, _F32P, c_int64]
BINARY_BACKWARD_ARGTYPES = [_F32P, _F32P, _F32P, _F32P, _F32P, c_int64]
UNARY_FORWARD_ARGTYPES = [_F32P, _F32P, c_int64]
UNARY_BACKWARD_ARGTYPES = [_F32P, _F32P, _F32P, c_int64]


class ElementwiseNativeKernels:
    """
    Namespace for elementwise native kernel symbol names.

    This small registry keeps exported C symbol names in one place.
    """

    @staticmethod
    def forward(op: OpKind) -> str:
        return f"trigrad_{op.value}_forward_f32"

    @staticmethod
    def backward(op: OpKind) -> str:
        return f"trigrad_{op.value}_backward_f32"


def _ptr(arr: np.ndarray):
    return arr.ctypes.data_as(_F32P)


def _check_f32(name: str, arr: np.ndarray, n: int) -> np.ndarray:
    if arr.dtype != np.float32:
        raise TypeError(f"{name} must be float32, got {arr.dtype}")
    if arr.size != n:
        raise ValueError(f"{name} must have {n} elements, got {arr.size}")
    if not arr.flags["C_CONTIGUOUS"]:
        raise ValueError(f"{name} must be C-contiguous")
    return arr


def _bind(lib: ctypes.CDLL, symbol: str, argtypes: list):
    fn = getattr(lib, symbol)
    fn.argtypes = argtypes
    fn.restype = c_int
    return fn


def _check_status(symbol: str, status: int) -> None:
    if status != 0:
        raise RuntimeError(f"{symbol} failed with status={status}")


def binary_forward_f32_ctypes(
    lib: ctypes.CDLL, op: OpKind, *, a: np.ndarray, b: np.ndarray, out: np.ndarray
) -> None:
    """
    Call a binary forward kernel, writing ``op(a, b)`` into `out`.

    Parameters
    ----------
    lib : ctypes.CDLL
        Loaded trigrad native shared library.
    op : OpKind
        One of ADD, SUB, MUL, DIV, POW.
    a, b : np.ndarray
        Flat float32 operands of equal length.
    out : np.ndarray
        Flat float32 output buffer, same length.
    """
    n = out.size
    for name, arr in (("a", a), ("b", b), ("out", out)):
        _check_f32(name, arr, n)

    symbol = ElementwiseNativeKernels.forward(op)
    fn = _bind(lib, symbol, BINARY_FORWARD_ARGTYPES)
    _check_status(symbol, fn(_ptr(a), _ptr(b), _ptr(out), c_int64(n)))


def binary_backward_f32_ctypes(
    lib: ctypes.CDLL,
    op: OpKind,
    *,
    grad_a: np.ndarray,
    grad_b: np.ndarray,
    grad_out: np.ndarray,
    a: np.ndarray,
    b: np.ndarray,
) -> None:
    """
    Call a binary backward kernel, accumulating into `grad_a` and `grad_b`.

    Passing the same array for both gradients is allowed and is how aliased
    operands are handled.
    """
    n = grad_out.size
    for name, arr in (
        ("grad_a", grad_a),
        ("grad_b", grad_b),
        ("grad_out", grad_out),
        ("a", a),
        ("b", b),
    ):
        _check_f32(name, arr, n)

    symbol = ElementwiseNativeKernels.backward(op)
    fn = _bind(lib, symbol, BINARY_BACKWARD_ARGTYPES)
    status = fn(
        _ptr(grad_a), _ptr(grad_b), _ptr(grad_out), _ptr(a), _ptr(b), c_int64(n)
    )
    _check_status(symbol, status)


def unary_forward_f32_ctypes(
    lib: ctypes.CDLL, op: OpKind, *, x: np.ndarray, out: np.ndarray
) -> None:
    """Call a unary forward kernel (NEG, EXP, TANH), writing into `out`."""
    n = out.size
    _check_f32("x", x, n)
    _check_f32("out", out, n)

    symbol = ElementwiseNativeKernels.forward(op)
    fn = _bind(lib, symbol, UNARY_FORWARD_ARGTYPES)
    _check_status(symbol, fn(_ptr(x), _ptr(out), c_int64(n)))


def unary_backward_f32_ctypes(
    lib: ctypes.CDLL,
    op: OpKind,
    *,
    grad_x: np.ndarray,
    grad_out: np.ndarray,
    x: np.ndarray,
) -> None:
    """Call a unary backward kernel, accumulating into `grad_x`."""
    n = grad_out.size
    for name, arr in (("grad_x", grad_x), ("grad_out", grad_out), ("x", x)):
        _check_f32(name, arr, n)

    symbol = ElementwiseNativeKernels.backward(op)
    fn = _bind(lib, symbol, UNARY_BACKWARD_ARGTYPES)
    _check_status(symbol, fn(_ptr(grad_x), _ptr(grad_out), _ptr(x), c_int64(n)))
