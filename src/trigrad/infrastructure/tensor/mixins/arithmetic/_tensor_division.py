"""
Backend implementations of Tensor true division via control-path dispatch.

This module registers the reference, native and GPU implementations of
`TensorMixinArithmetic.div`. All three share the same contract: operands of
equal total length, a result with the receiver's shape, and a context tagged
``OpKind.DIV`` whose backward rule is applied by the backend's backward step.
"""

from typing import Union

import numpy as np

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinArithmetic as TMA

Number = Union[int, float]


@tensor_control_path_manager(TMA, TMA.div, DeviceType.CPU)
def tensor_div_cpu(self, other: Union["Tensor", Number]):
    """
    Reference elementwise division. Division by zero yields inf or nan,
    without a warning.
    """
    other_t = self._binary_operand(OpKind.DIV, other)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = self.values / other_t.values
    return self._result(out, Context(OpKind.DIV, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.div, DeviceType.NATIVE)
def tensor_div_native(self, other: Union["Tensor", Number]):
    """
    Elementwise division through ``trigrad_div_forward_f32``.

    Raises
    ------
    BackendError
        On a loader failure or a non-zero kernel status.
    """
    other_t = self._binary_operand(OpKind.DIV, other)

    from ....ops.native_ext import binary_forward

    out = binary_forward(OpKind.DIV, self, other_t)
    return self._result(out, Context(OpKind.DIV, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.div, DeviceType.WGPU)
def tensor_div_wgpu(self, other: Union["Tensor", Number]):
    """GPU elementwise division; returns a coroutine."""
    other_t = self._binary_operand(OpKind.DIV, other)

    from ....ops.wgpu_ext import binary_forward

    async def run():
        out = await binary_forward(OpKind.DIV, self, other_t)
        return self._result(out, Context(OpKind.DIV, (self, other_t)))

    return run()
