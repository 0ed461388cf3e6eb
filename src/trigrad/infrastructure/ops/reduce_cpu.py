"""
Reference (CPU) axis-sum kernels built on the index translator.

These kernels deliberately walk coordinates element by element with
``dim_indices`` / ``flat_index`` instead of calling ``numpy.sum``: the native
and GPU kernels implement the same coordinate round-trip, and this module is
the ground truth they are compared against.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..utils._indexing import (
    dim_indices,
    flat_index,
    insert_axis,
    remove_axis,
    total_length,
)


def sum_forward_cpu(values: np.ndarray, shape: Sequence[int], axis: int) -> np.ndarray:
    """
    Sum a flat buffer along `axis`.

    Parameters
    ----------
    values : np.ndarray
        Flat float32 input of length ``total_length(shape)``.
    shape : Sequence[int]
        Input shape.
    axis : int
        Axis to reduce.

    Returns
    -------
    np.ndarray
        Flat float32 output whose layout matches the reduced shape.
    """
    out_dims = remove_axis(shape, axis)
    out_len = total_length(out_dims) if out_dims else 1
    out = np.zeros(out_len, dtype=np.float32)

    for i in range(out_len):
        coords = dim_indices(i, out_dims)
        acc = np.float32(0.0)
        for k in range(shape[axis]):
            acc += values[flat_index(insert_axis(coords, axis, k), shape)]
        out[i] = acc
    return out


def sum_backward_cpu(
    grad_x: np.ndarray, grad_out: np.ndarray, shape: Sequence[int], axis: int
) -> None:
    """
    Accumulate the gradient of an axis sum into `grad_x` in place.

    Every input element receives the output gradient found at its own
    coordinates with the reduced axis removed.
    """
    out_dims = remove_axis(shape, axis)
    for i in range(total_length(shape)):
        coords = remove_axis(dim_indices(i, shape), axis)
        grad_x[i] += grad_out[flat_index(coords, out_dims)]
