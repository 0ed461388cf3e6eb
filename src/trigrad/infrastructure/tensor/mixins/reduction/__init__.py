"""
Reduction mixins and backend-specific implementations for Tensor operations.

Implementation modules are imported for their control-path registrations.
"""

from ._tensor_sum import *
from ._base import TensorMixinReduction

__all__ = [
    TensorMixinReduction.__name__,
]
