from ._indexing import (
    dim_indices,
    flat_index,
    insert_axis,
    reduced_shape,
    remove_axis,
    total_length,
)
from ._random import LinearCongruentialGenerator

__all__ = [
    dim_indices.__name__,
    flat_index.__name__,
    insert_axis.__name__,
    reduced_shape.__name__,
    remove_axis.__name__,
    total_length.__name__,
    LinearCongruentialGenerator.__name__,
]
