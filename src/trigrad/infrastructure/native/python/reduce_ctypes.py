"""
ctypes bindings for the trigrad axis-sum native kernels.

C ABI
-----
::

    int trigrad_sum_forward_f32(const int32_t* shape, int32_t rank, int32_t axis,
                                const float* x, float* out);
    int trigrad_sum_backward_f32(const int32_t* shape, int32_t rank, int32_t axis,
                                 float* grad_x, const float* grad_out);

`shape` is the *input* shape. The kernels map coordinates with the same
flat-index arithmetic as ``trigrad.infrastructure.utils.flat_index``
(axis 0 fastest), so outputs line up with the reference backend.
"""

from __future__ import annotations

import ctypes
from ctypes import POINTER, c_float, c_int, c_int32
from typing import Sequence

import numpy as np

from ...utils._indexing import total_length

_F32P = POINTER(c_float)
_I32P = POINTER(c_int32)

SUM_FORWARD_ARGTYPES = [_I32P, c_int32, c_int32, _F32P, _F32P]
SUM_BACKWARD_ARGTYPES = [_I32P, c_int32, c_int32, _F32P, _F32P]


class ReduceNativeKernels:
    """Exported symbol names for the sum kernels."""

    SUM_FORWARD_F32: str = "trigrad_sum_forward_f32"
    SUM_BACKWARD_F32: str = "trigrad_sum_backward_f32"


def _shape_array(shape: Sequence[int], axis: int) -> np.ndarray:
    if not 0 <= axis < len(shape):
        raise ValueError(f"axis {axis} is out of range for rank {len(shape)}")
    return np.ascontiguousarray(shape, dtype=np.int32)


def sum_forward_f32_ctypes(
    lib: ctypes.CDLL,
    *,
    x: np.ndarray,
    out: np.ndarray,
    shape: Sequence[int],
    axis: int,
) -> None:
    """
    Call the native sum forward kernel.

    Parameters
    ----------
    lib : ctypes.CDLL
        Loaded trigrad native shared library.
    x : np.ndarray
        Flat float32 input, ``total_length(shape)`` elements.
    out : np.ndarray
        Flat float32 output, ``total_length(shape) // shape[axis]`` elements.
        The kernel overwrites it.
    shape : Sequence[int]
        Input shape.
    axis : int
        Axis to reduce.
    """
    dims = _shape_array(shape, axis)
    n_in = total_length(shape)
    if x.dtype != np.float32 or out.dtype != np.float32:
        raise TypeError("sum kernels require float32 buffers")
    if x.size != n_in or out.size != n_in // shape[axis]:
        raise ValueError("buffer sizes do not match shape/axis")

    fn = getattr(lib, ReduceNativeKernels.SUM_FORWARD_F32)
    fn.argtypes = SUM_FORWARD_ARGTYPES
    fn.restype = c_int
    status = fn(
        dims.ctypes.data_as(_I32P),
        c_int32(len(shape)),
        c_int32(axis),
        x.ctypes.data_as(_F32P),
        out.ctypes.data_as(_F32P),
    )
    if status != 0:
        raise RuntimeError(
            f"{ReduceNativeKernels.SUM_FORWARD_F32} failed with status={status}"
        )


def sum_backward_f32_ctypes(
    lib: ctypes.CDLL,
    *,
    grad_x: np.ndarray,
    grad_out: np.ndarray,
    shape: Sequence[int],
    axis: int,
) -> None:
    """
    Call the native sum backward kernel, accumulating into `grad_x`.
    """
    dims = _shape_array(shape, axis)
    n_in = total_length(shape)
    if grad_x.dtype != np.float32 or grad_out.dtype != np.float32:
        raise TypeError("sum kernels require float32 buffers")
    if grad_x.size != n_in or grad_out.size != n_in // shape[axis]:
        raise ValueError("buffer sizes do not match shape/axis")

    fn = getattr(lib, ReduceNativeKernels.SUM_BACKWARD_F32)
    fn.argtypes = SUM_BACKWARD_ARGTYPES
    fn.restype = c_int
    status = fn(
        dims.ctypes.data_as(_I32P),
        c_int32(len(shape)),
        c_int32(axis),
        grad_x.ctypes.data_as(_F32P),
        grad_out.ctypes.data_as(_F32P),
    )
    if status != 0:
        raise RuntimeError(
            f"{ReduceNativeKernels.SUM_BACKWARD_F32} failed with status={status}"
        )
