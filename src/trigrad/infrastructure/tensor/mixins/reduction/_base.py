"""
Reduction mixin interface for Tensor operations.

This module defines an abstract mixin, `TensorMixinReduction`, that declares
axis reductions supported by Tensor implementations. Concrete behavior is
registered per backend in the sibling modules.
"""

from abc import ABC


class TensorMixinReduction(ABC):
    """
    Abstract mixin declaring reduction operations for tensors.

    Notes
    -----
    Reductions walk coordinates with the shared index translator
    (``flat_index`` / ``dim_indices``), so every backend emits values in the
    same order as the reference backend.
    """

    def sum(self, axis_to_reduce: int = 0, keep_dims: bool = False):
        """
        Sum elements along one axis.

        Parameters
        ----------
        axis_to_reduce : int, optional
            Non-negative axis to collapse. Defaults to 0.
        keep_dims : bool, optional
            If True, the reduced axis is kept with extent 1. Otherwise it is
            removed; reducing a rank-1 tensor without `keep_dims` yields shape
            ``(1,)``.

        Returns
        -------
        Tensor
            Reduced tensor (awaitable on the GPU backend).

        Raises
        ------
        ValueError
            If `axis_to_reduce` is out of range.

        Notes
        -----
        Backward rule: every input element receives the output gradient at
        its coordinates with the reduced axis dropped.
        """
        ...
