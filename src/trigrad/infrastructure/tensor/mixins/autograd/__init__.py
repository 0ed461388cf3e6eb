from ._tensor_backward import *
from ._base import TensorMixinAutograd

__all__ = [
    TensorMixinAutograd.__name__,
]
