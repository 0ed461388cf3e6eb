"""
Backend implementations of Tensor exponential via control-path dispatch.
"""

import numpy as np

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._context import Context
from .....domain._ops import OpKind
from .....domain.device._device import DeviceType

from ._base import TensorMixinUnary as TMU


@tensor_control_path_manager(TMU, TMU.exp, DeviceType.CPU)
def tensor_exp_cpu(self):
    """Reference exponential; overflow gives inf."""
    with np.errstate(over="ignore"):
        out = np.exp(self.values)
    return self._result(out, Context(OpKind.EXP, (self,)))


@tensor_control_path_manager(TMU, TMU.exp, DeviceType.NATIVE)
def tensor_exp_native(self):
    """
    Exponential through ``trigrad_exp_forward_f32``.

    Raises
    ------
    BackendError
        On a loader failure or a non-zero kernel status.
    """
    from ....ops.native_ext import unary_forward

    out = unary_forward(OpKind.EXP, self)
    return self._result(out, Context(OpKind.EXP, (self,)))


@tensor_control_path_manager(TMU, TMU.exp, DeviceType.WGPU)
def tensor_exp_wgpu(self):
    """
    GPU exponential.

    Returns
    -------
    Coroutine
        Resolves to the new `Tensor`.
    """
    from ....ops.wgpu_ext import unary_forward

    async def run():
        out = await unary_forward(OpKind.EXP, self)
        return self._result(out, Context(OpKind.EXP, (self,)))

    return run()
