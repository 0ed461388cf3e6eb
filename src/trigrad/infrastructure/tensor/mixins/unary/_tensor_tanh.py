"""
Backend implementations of Tensor hyperbolic tangent via control-path dispatch.
"""

import numpy as np

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinUnary as TMU


@tensor_control_path_manager(TMU, TMU.tanh, DeviceType.CPU)
def tensor_tanh_cpu(self):
    out = np.tanh(self.values)
    return self._result(out, Context(OpKind.TANH, (self,)))


@tensor_control_path_manager(TMU, TMU.tanh, DeviceType.NATIVE)
def tensor_tanh_native(self):
    """Hyperbolic tangent through ``trigrad_tanh_forward_f32``."""
    from ....ops.native_ext import unary_forward

    out = unary_forward(OpKind.TANH, self)
    return self._result(out, Context(OpKind.TANH, (self,)))


@tensor_control_path_manager(TMU, TMU.tanh, DeviceType.WGPU)
def tensor_tanh_wgpu(self):
    """
    GPU hyperbolic tangent; returns a coroutine resolving to the result.
    """
    from ....ops.wgpu_ext import unary_forward

    async def run():
        out = await unary_forward(OpKind.TANH, self)
        return self._result(out, Context(OpKind.TANH, (self,)))

    return run()
