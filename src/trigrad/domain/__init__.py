from ._errors import (
    BackendError,
    ConstructionError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    ShapeMismatchError,
)
from ._node import INode
from ._ops import OpKind

__all__ = [
    BackendError.__name__,
    ConstructionError.__name__,
    DeviceMismatchError.__name__,
    DeviceNotSupportedError.__name__,
    ShapeMismatchError.__name__,
    INode.__name__,
    OpKind.__name__,
]
