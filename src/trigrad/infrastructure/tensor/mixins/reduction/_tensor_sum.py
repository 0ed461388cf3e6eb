"""
Backend implementations of `TensorMixinReduction.sum`.

All three backends compute the output shape the same way (see
``reduced_shape``) and tag the result with ``OpKind.SUM`` and the metadata the
backward rule needs: the input shape and the reduced axis.

The reference path walks coordinates with the index translator in
``ops/reduce_cpu.py``; the native and GPU kernels reproduce the same
coordinate round-trip, so all three agree on output ordering.
"""

import operator

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from ....ops.reduce_cpu import sum_forward_cpu
from ....utils._indexing import reduced_shape
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinReduction as TMR


def _prepare(self, axis_to_reduce, keep_dims: bool):
    # NumPy integer axes are accepted; kernels and saved metadata get an int.
    try:
        axis = operator.index(axis_to_reduce)
    except TypeError as e:
        raise TypeError(
            f"axis must be an integer, got {type(axis_to_reduce).__name__}"
        ) from e
    out_shape = reduced_shape(self.shape, axis, keep_dims)
    ctx = Context(
        OpKind.SUM,
        (self,),
        saved_meta={"in_shape": self.shape, "axis": axis},
    )
    return axis, out_shape, ctx


@tensor_control_path_manager(TMR, TMR.sum, DeviceType.CPU)
def tensor_sum_cpu(self, axis_to_reduce: int = 0, keep_dims: bool = False):
    """
    Reference axis sum.

    For every output element, recover its coordinates against the reduced
    shape, splice each index ``k`` of the reduced axis back in, and add the
    input value found at the resulting flat offset.
    """
    axis, out_shape, ctx = _prepare(self, axis_to_reduce, keep_dims)
    out = sum_forward_cpu(self.values, self.shape, axis)
    return self._result(out, ctx, shape=out_shape)


@tensor_control_path_manager(TMR, TMR.sum, DeviceType.NATIVE)
def tensor_sum_native(self, axis_to_reduce: int = 0, keep_dims: bool = False):
    """
    Axis sum through ``trigrad_sum_forward_f32``.

    The shape is passed as an int32 array next to the axis; the kernel
    writes into a caller-allocated output buffer.

    Raises
    ------
    BackendError
        If the native library cannot be loaded or reports a failure.
    """
    axis, out_shape, ctx = _prepare(self, axis_to_reduce, keep_dims)

    from ....ops.native_ext import sum_forward

    out = sum_forward(self, axis)
    return self._result(out, ctx, shape=out_shape)


@tensor_control_path_manager(TMR, TMR.sum, DeviceType.WGPU)
def tensor_sum_wgpu(self, axis_to_reduce: int = 0, keep_dims: bool = False):
    """
    Axis sum on the GPU.

    The axis and shape are checked here, synchronously; the returned
    coroutine dispatches ``sum.forward`` with one invocation per output
    element, each owning a ``rank * 4 - 2`` word arena slice.

    Returns
    -------
    Coroutine
        Resolves to the reduced `Tensor`.
    """
    axis, out_shape, ctx = _prepare(self, axis_to_reduce, keep_dims)

    from ....ops.wgpu_ext import sum_forward

    async def run():
        out = await sum_forward(self, axis)
        return self._result(out, ctx, shape=out_shape)

    return run()
