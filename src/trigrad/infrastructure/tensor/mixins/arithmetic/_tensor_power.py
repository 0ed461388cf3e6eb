"""
Backend implementations of Tensor exponentiation via control-path dispatch.

This module registers the reference, native and GPU implementations of
`TensorMixinArithmetic.pow`. All three share the same contract: operands of
equal total length, a result with the receiver's shape, and a context tagged
``OpKind.POW`` whose backward rule is applied by the backend's backward step.
"""

from typing import Union

import numpy as np

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinArithmetic as TMA

Number = Union[int, float]


@tensor_control_path_manager(TMA, TMA.pow, DeviceType.CPU)
def tensor_pow_cpu(self, other: Union["Tensor", Number]):
    """
    Reference elementwise power, following ``np.power`` for float32: a
    negative base with an integral exponent keeps its sign, and a negative
    base with a fractional exponent gives nan.
    """
    other_t = self._binary_operand(OpKind.POW, other)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        out = np.power(self.values, other_t.values)
    return self._result(out, Context(OpKind.POW, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.pow, DeviceType.NATIVE)
def tensor_pow_native(self, other: Union["Tensor", Number]):
    """
    Elementwise power through ``trigrad_pow_forward_f32`` (C ``powf``).

    Raises
    ------
    BackendError
        On a loader failure or a non-zero kernel status.
    """
    other_t = self._binary_operand(OpKind.POW, other)

    from ....ops.native_ext import binary_forward

    out = binary_forward(OpKind.POW, self, other_t)
    return self._result(out, Context(OpKind.POW, (self, other_t)))


@tensor_control_path_manager(TMA, TMA.pow, DeviceType.WGPU)
def tensor_pow_wgpu(self, other: Union["Tensor", Number]):
    """
    GPU elementwise power.

    The kernel uses the ``spow`` helper rather than WGSL ``pow`` so negative
    and zero bases match the reference and native results.

    Returns
    -------
    Coroutine
        Resolves to the new `Tensor`.
    """
    other_t = self._binary_operand(OpKind.POW, other)

    from ....ops.wgpu_ext import binary_forward

    async def run():
        out = await binary_forward(OpKind.POW, self, other_t)
        return self._result(out, Context(OpKind.POW, (self, other_t)))

    return run()
