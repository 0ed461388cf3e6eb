"""
Backend implementations of Tensor addition via control-path dispatch.

This module registers the reference, native and GPU implementations of
`TensorMixinArithmetic.add`. All three share the same contract: operands of
equal total length, a result with the receiver's shape, and a context tagged
``OpKind.ADD`` whose backward rule is applied by the backend's backward step.
"""

from typing import Union

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinArithmetic as TMA

Number = Union[int, float]


@tensor_control_path_manager(TMA, TMA.add, DeviceType.CPU)
def tensor_add_cpu(self, other: Union["Tensor", Number]):
    """Reference elementwise addition over the flat buffers."""
    other_t = self._binary_operand(OpKind.ADD, other)
    out = self.values + other_t.values
    return self._result(out, Context(OpKind.ADD, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.add, DeviceType.NATIVE)
def tensor_add_native(self, other: Union["Tensor", Number]):
    """
    Elementwise addition through ``trigrad_add_forward_f32``.

    Raises
    ------
    BackendError
        If the native library cannot be loaded or returns a non-zero status.
    """
    other_t = self._binary_operand(OpKind.ADD, other)

    from ....ops.native_ext import binary_forward

    out = binary_forward(OpKind.ADD, self, other_t)
    return self._result(out, Context(OpKind.ADD, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.add, DeviceType.WGPU)
def tensor_add_wgpu(self, other: Union["Tensor", Number]):
    """
    GPU elementwise addition.

    Operands are validated before the coroutine is created, so a device or
    length mismatch raises here rather than when awaited.

    Returns
    -------
    Coroutine
        Resolves to the new `Tensor` once ``add.forward`` has been read back.
    """
    other_t = self._binary_operand(OpKind.ADD, other)

    from ....ops.wgpu_ext import binary_forward

    async def run():
        out = await binary_forward(OpKind.ADD, self, other_t)
        return self._result(out, Context(OpKind.ADD, (self, other_t)))

    return run()
