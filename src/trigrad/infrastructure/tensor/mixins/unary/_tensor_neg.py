"""
Backend implementations of Tensor negation via control-path dispatch.
"""

import numpy as np

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinUnary as TMU


@tensor_control_path_manager(TMU, TMU.neg, DeviceType.CPU)
def tensor_neg_cpu(self):
    """Reference negation."""
    out = np.negative(self.values)
    return self._result(out, Context(OpKind.NEG, (self,)))


@tensor_control_path_manager(TMU, TMU.neg, DeviceType.NATIVE)
def tensor_neg_native(self):
    """Negation through ``trigrad_neg_forward_f32``."""
    from ....ops.native_ext import unary_forward

    out = unary_forward(OpKind.NEG, self)
    return self._result(out, Context(OpKind.NEG, (self,)))


@tensor_control_path_manager(TMU, TMU.neg, DeviceType.WGPU)
def tensor_neg_wgpu(self):
    """GPU negation; returns a coroutine resolving to the result."""
    from ....ops.wgpu_ext import unary_forward

    async def run():
        out = await unary_forward(OpKind.NEG, self)
        return self._result(out, Context(OpKind.NEG, (self,)))

    return run()
