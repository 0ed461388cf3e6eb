"""
Tensor control-path manager for backend-specific dispatch.

This module defines the shared control-path manager used to register and
resolve backend-specific implementations of Tensor methods. Dispatch is keyed
by ``Tensor._state``, which is the tensor's `DeviceType`, so a single
registration serves every device index of a backend:

    @tensor_control_path_manager(TensorMixin, TensorMixin.op, DeviceType.CPU)
    def op_cpu(self, ...): ...

    @tensor_control_path_manager(TensorMixin, TensorMixin.op, DeviceType.WGPU)
    async def op_wgpu(self, ...): ...

A call on a device with no registered implementation raises
`DeviceNotSupportedError`.
"""

from ...domain._errors import DeviceNotSupportedError
from ...domain.utils._control_path import create_path_builder


def _raise_not_supported(self, method) -> None:
    raise DeviceNotSupportedError(method.__name__, str(self.device))


tensor_control_path_manager = create_path_builder(on_missing=_raise_not_supported)
