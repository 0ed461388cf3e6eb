"""
Unary elementwise Tensor operations (interface).

Backend implementations are registered in the sibling modules.
"""

from abc import ABC


class TensorMixinUnary(ABC):
    """
    Abstract mixin declaring the unary elementwise operations.

    Every method returns a new tensor with the receiver's shape; on the GPU
    backend the result is awaitable.
    """

    def neg(self):
        """
        Elementwise negation.

        Notes
        -----
        Backward rule: ``d/da = -1``.
        """
        ...

    def exp(self):
        """
        Elementwise natural exponential.

        Notes
        -----
        Backward rule: ``d/da = exp(a)``.
        """
        ...

    def tanh(self):
        """
        Elementwise hyperbolic tangent.

        Notes
        -----
        Backward rule: ``d/da = 1 - tanh(a)^2``.
        """
        ...

    def __neg__(self):
        return self.neg()
