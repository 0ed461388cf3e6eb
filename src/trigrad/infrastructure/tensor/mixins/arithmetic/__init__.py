"""
Arithmetic mixins and backend-specific implementations for Tensor operations.

This package aggregates the binary elementwise operations:

- addition        (``add`` / ``+``)
- subtraction     (``sub`` / ``-``)
- multiplication  (``mul`` / ``*``)
- true division   (``div`` / ``/``)
- exponentiation  (``pow`` / ``**``)

Concrete implementation modules are imported for their side effects:
registering control paths with the tensor control-path manager. Only the base
mixin is part of the public interface.
"""

from ._tensor_addition import *
from ._tensor_subtraction import *
from ._tensor_multiplication import *
from ._tensor_division import *
from ._tensor_power import *
from ._base import TensorMixinArithmetic

__all__ = [
    TensorMixinArithmetic.__name__,
]
