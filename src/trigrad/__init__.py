"""
trigrad: a small reverse-mode automatic differentiation engine.

Public surface:

- `Scalar`: single-value autodiff node
- `Tensor`: N-dimensional autodiff node on a ``"cpu"``, ``"native"`` or
  ``"wgpu:<index>"`` device
- index translation helpers for the axis-0-fastest flat layout
- the graph scheduler (`topological_sort`)

The GPU backend (and therefore ``wgpu``) is imported lazily, the first time a
tensor on a wgpu device runs an operation.
"""

from .domain import (
    BackendError,
    ConstructionError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    OpKind,
    ShapeMismatchError,
)
from .domain.device import Device, DeviceType
from .infrastructure.autograd import Context, topological_sort
from .infrastructure.scalar import Scalar, as_scalars
from .infrastructure.tensor import Tensor
from .infrastructure.utils import (
    LinearCongruentialGenerator,
    dim_indices,
    flat_index,
    insert_axis,
    reduced_shape,
    remove_axis,
    total_length,
)

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "ConstructionError",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "OpKind",
    "ShapeMismatchError",
    "Device",
    "DeviceType",
    "Context",
    "topological_sort",
    "Scalar",
    "as_scalars",
    "Tensor",
    "LinearCongruentialGenerator",
    "dim_indices",
    "flat_index",
    "insert_axis",
    "reduced_shape",
    "remove_axis",
    "total_length",
]
