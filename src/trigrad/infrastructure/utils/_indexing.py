"""
Flat-offset <-> per-axis coordinate translation.

All tensors store their values in a flat float32 buffer in which axis 0 varies
fastest (the layout NumPy calls Fortran order). The helpers in this module are
the single source of truth for mapping between a flat offset and per-axis
coordinates, and every reduction kernel on every backend reproduces exactly
this arithmetic so that outputs are ordered identically.

Examples
--------
>>> flat_index([1, 1, 1], [3, 3, 3])
13
>>> dim_indices(13, [3, 3, 3])
[1, 1, 1]
"""

from __future__ import annotations

import operator
from typing import Sequence


def flat_index(indices: Sequence[int], shape: Sequence[int]) -> int:
    """
    Translate per-axis coordinates into a flat buffer offset.

    Axes are walked from the last to the first, accumulating
    ``index = index * shape[axis] + indices[axis]``.

    Parameters
    ----------
    indices : Sequence[int]
        One coordinate per axis.
    shape : Sequence[int]
        Extent of every axis.

    Returns
    -------
    int
        Offset into the flat buffer.

    Raises
    ------
    ValueError
        If ``len(indices) != len(shape)``.
    """
    if len(indices) != len(shape):
        raise ValueError(
            f"Indices count must match shape: got {len(indices)} indices "
            f"for a shape of rank {len(shape)}."
        )
    index = 0
    for axis in range(len(shape) - 1, -1, -1):
        index = index * shape[axis] + indices[axis]
    return index


def dim_indices(index: int, shape: Sequence[int]) -> list[int]:
    """
    Translate a flat buffer offset into per-axis coordinates.

    This is the inverse of :func:`flat_index` for every
    ``0 <= index < total_length(shape)``.
    """
    out: list[int] = []
    for size in shape:
        out.append(index % size)
        index //= size
    return out


def total_length(shape: Sequence[int]) -> int:
    """
    Return the number of elements described by `shape`.

    Raises
    ------
    ValueError
        If `shape` is empty.
    """
    if len(shape) == 0:
        raise ValueError("total_length() requires a non-empty shape.")
    n = 1
    for size in shape:
        n *= size
    return n


def _check_axis(axis: int, rank: int, *, allow_end: bool = False) -> int:
    """Return `axis` as a plain int after checking it against `rank`."""
    try:
        axis = operator.index(axis)
    except TypeError as e:
        raise TypeError(f"axis must be an integer, got {type(axis).__name__}") from e
    upper = rank if allow_end else rank - 1
    if axis < 0 or axis > upper:
        raise ValueError(f"axis {axis!r} is out of range for rank {rank}.")
    return axis


def remove_axis(seq: Sequence[int], axis: int) -> list[int]:
    """Return a copy of `seq` without the entry at `axis`."""
    axis = _check_axis(axis, len(seq))
    return [v for i, v in enumerate(seq) if i != axis]


def insert_axis(seq: Sequence[int], axis: int, value: int) -> list[int]:
    """Return a copy of `seq` with `value` spliced in at position `axis`."""
    axis = _check_axis(axis, len(seq), allow_end=True)
    out = list(seq)
    out.insert(axis, value)
    return out


def reduced_shape(
    shape: Sequence[int], axis: int, keep_dims: bool = False
) -> tuple[int, ...]:
    """
    Shape produced by reducing `shape` along `axis`.

    The reduced axis is dropped, or kept with extent 1 when `keep_dims` is
    set. Reducing a rank-1 shape without `keep_dims` yields ``(1,)`` because
    every node needs a non-empty shape.
    """
    axis = _check_axis(axis, len(shape))
    if keep_dims:
        out = list(shape)
        out[axis] = 1
        return tuple(out)
    return tuple(remove_axis(shape, axis)) or (1,)
