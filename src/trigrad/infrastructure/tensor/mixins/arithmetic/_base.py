"""
Arithmetic mixin defining binary elementwise Tensor operations.

This module declares :class:`TensorMixinArithmetic`, an abstract mixin that
specifies the public API and derivative rules for the binary elementwise
operations. The mixin does not compute anything itself: reference, native and
GPU implementations register themselves per backend through the tensor
control-path manager.
"""

from typing import Union
from abc import ABC

Number = Union[int, float]


class TensorMixinArithmetic(ABC):
    """
    Abstract mixin defining binary elementwise operations for tensors.

    Notes
    -----
    - Operands must have equal total length; shapes may differ, and the
      result takes the receiver's shape.
    - Numbers are promoted to a filled tensor with the receiver's shape and
      device.
    - When both operands are the same tensor, the contributions of both
      operand positions are accumulated into its gradient.
    - On the GPU backend every method returns an awaitable.
    """

    def add(self, other: Union["TensorMixinArithmetic", Number]):
        """
        Elementwise addition.

        Notes
        -----
        Backward rule: ``d/da = 1``, ``d/db = 1``.
        """
        ...

    def sub(self, other: Union["TensorMixinArithmetic", Number]):
        """
        Elementwise subtraction.

        Notes
        -----
        Backward rule: ``d/da = 1``, ``d/db = -1``.
        """
        ...

    def mul(self, other: Union["TensorMixinArithmetic", Number]):
        """
        Elementwise multiplication.

        Notes
        -----
        Backward rule: ``d/da = b``, ``d/db = a``.
        """
        ...

    def div(self, other: Union["TensorMixinArithmetic", Number]):
        """
        Elementwise true division.

        Notes
        -----
        Backward rule: ``d/da = 1 / b``, ``d/db = -a / b^2``.
        """
        ...

    def pow(self, other: Union["TensorMixinArithmetic", Number]):
        """
        Elementwise power ``a ** b``.

        Notes
        -----
        Backward rule:
        - ``d/da = b * a^(b - 1)``
        - ``d/db = ln(a) * a^b``

        Non-positive bases produce NaN (or -inf) in ``d/db``; these values
        are propagated as-is.
        """
        ...

    # ----------------------------
    # Operator sugar
    # ----------------------------
    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other: Number):
        return self._as_tensor_like(other, self).add(self)

    def __sub__(self, other):
        return self.sub(other)

    def __rsub__(self, other: Number):
        return self._as_tensor_like(other, self).sub(self)

    def __mul__(self, other):
        return self.mul(other)

    def __rmul__(self, other: Number):
        return self._as_tensor_like(other, self).mul(self)

    def __truediv__(self, other):
        return self.div(other)

    def __rtruediv__(self, other: Number):
        return self._as_tensor_like(other, self).div(self)

    def __pow__(self, other):
        return self.pow(other)

    def __rpow__(self, other: Number):
        return self._as_tensor_like(other, self).pow(self)
