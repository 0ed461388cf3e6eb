"""
Unary elementwise Tensor operations: ``neg``, ``exp`` and ``tanh``.

Implementation modules are imported for their control-path registrations.
"""

from ._tensor_neg import *
from ._tensor_exp import *
from ._tensor_tanh import *
from ._base import TensorMixinUnary

__all__ = [
    TensorMixinUnary.__name__,
]
