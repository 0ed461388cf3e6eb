"""
Backend implementations of Tensor multiplication via control-path dispatch.

This module registers the reference, native and GPU implementations of
`TensorMixinArithmetic.mul`. All three share the same contract: operands of
equal total length, a result with the receiver's shape, and a context tagged
``OpKind.MUL`` whose backward rule is applied by the backend's backward step.
"""

from typing import Union

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinArithmetic as TMA

Number = Union[int, float]


@tensor_control_path_manager(TMA, TMA.mul, DeviceType.CPU)
def tensor_mul_cpu(self, other: Union["Tensor", Number]):
    """Reference elementwise product."""
    other_t = self._binary_operand(OpKind.MUL, other)
    out = self.values * other_t.values
    return self._result(out, Context(OpKind.MUL, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.mul, DeviceType.NATIVE)
def tensor_mul_native(self, other: Union["Tensor", Number]):
    """
    Elementwise product through ``trigrad_mul_forward_f32``.

    The output buffer is allocated here and filled by the kernel.
    """
    other_t = self._binary_operand(OpKind.MUL, other)

    from ....ops.native_ext import binary_forward

    out = binary_forward(OpKind.MUL, self, other_t)
    return self._result(out, Context(OpKind.MUL, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.mul, DeviceType.WGPU)
def tensor_mul_wgpu(self, other: Union["Tensor", Number]):
    """
    GPU elementwise product.

    Returns
    -------
    Coroutine
        Resolves to the new `Tensor`.
    """
    other_t = self._binary_operand(OpKind.MUL, other)

    from ....ops.wgpu_ext import binary_forward

    async def run():
        out = await binary_forward(OpKind.MUL, self, other_t)
        return self._result(out, Context(OpKind.MUL, (self, other_t)))

    return run()
