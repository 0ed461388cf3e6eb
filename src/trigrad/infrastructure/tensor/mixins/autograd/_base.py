"""
Autograd entry point for Tensor (interface).
"""

from abc import ABC


class TensorMixinAutograd(ABC):
    """
    Abstract mixin declaring the backward entry point.

    Implementations seed the receiver's gradient to all-ones, order the graph
    with the shared scheduler, and run their backend's backward step on every
    node in reverse topological order.
    """

    def backward(self):
        """
        Backpropagate from this tensor.

        Returns
        -------
        None or Awaitable[None]
            ``None`` on the reference and native backends; an awaitable that
            resolves once every reachable gradient is populated on the GPU
            backend.

        Notes
        -----
        Gradients of non-root nodes are not cleared beforehand; call
        ``zero_grad()`` on leaves between independent passes.
        """
        ...
