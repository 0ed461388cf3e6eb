"""
Backend implementations of Tensor subtraction via control-path dispatch.

This module registers the reference, native and GPU implementations of
`TensorMixinArithmetic.sub`. All three share the same contract: operands of
equal total length, a result with the receiver's shape, and a context tagged
``OpKind.SUB`` whose backward rule is applied by the backend's backward step.
"""

from typing import Union

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinArithmetic as TMA

Number = Union[int, float]


@tensor_control_path_manager(TMA, TMA.sub, DeviceType.CPU)
def tensor_sub_cpu(self, other: Union["Tensor", Number]):
    """Reference elementwise subtraction."""
    other_t = self._binary_operand(OpKind.SUB, other)
    out = self.values - other_t.values
    return self._result(out, Context(OpKind.SUB, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.sub, DeviceType.NATIVE)
def tensor_sub_native(self, other: Union["Tensor", Number]):
    """
    Elementwise subtraction through ``trigrad_sub_forward_f32``.

    Raises
    ------
    BackendError
        On a loader failure or a non-zero kernel status.
    """
    other_t = self._binary_operand(OpKind.SUB, other)

    from ....ops.native_ext import binary_forward

    out = binary_forward(OpKind.SUB, self, other_t)
    return self._result(out, Context(OpKind.SUB, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.sub, DeviceType.WGPU)
def tensor_sub_wgpu(self, other: Union["Tensor", Number]):
    """
    GPU elementwise subtraction; returns a coroutine resolving to the result.
    """
    other_t = self._binary_operand(OpKind.SUB, other)

    from ....ops.wgpu_ext import binary_forward

    async def run():
        out = await binary_forward(OpKind.SUB, self, other_t)
        return self._result(out, Context(OpKind.SUB, (self, other_t)))

    return run()
