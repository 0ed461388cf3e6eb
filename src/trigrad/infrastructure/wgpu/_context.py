"""
Per-device GPU state: adapter/device handles and the compiled-kernel cache.

`WgpuBackend` maps each ``Device("wgpu:<index>")`` to one
`WgpuDeviceContext`, created on first use and kept for the lifetime of the
backend. Every context owns a `KernelCache` that compiles a kernel the first
time it is requested and hands out the same pipeline afterwards. Both first
populations happen under a lock, so concurrent first use never compiles
twice.

Tensors keep a non-owning reference to their context. `default_wgpu_backend`
returns the process-wide backend used when a tensor is created without an
explicit context.
"""

from __future__ import annotations

import logging
import os
import threading
from functools import lru_cache
from typing import Union

import wgpu

from ...domain._errors import BackendError
from ...domain.device._device import Device, DeviceType
from ...domain.device._device_protocol import DeviceLike
from ._kernel import CompiledKernel
from ._shaders import KernelSpec

logger = logging.getLogger(__name__)

POWER_PREFERENCE_ENV = "TRIGRAD_WGPU_POWER_PREFERENCE"


class KernelCache:
    """
    Lazily populated map from kernel name to `CompiledKernel` for one device.
    """

    def __init__(self, gpu_device, device_name: str) -> None:
        self._gpu_device = gpu_device
        self._device_name = device_name
        self._kernels: dict[str, CompiledKernel] = {}
        self._lock = threading.Lock()

    def get(self, spec: KernelSpec) -> CompiledKernel:
        kernel = self._kernels.get(spec.name)
        if kernel is not None:
            return kernel
        with self._lock:
            kernel = self._kernels.get(spec.name)
            if kernel is None:
                logger.debug("compiling %s for %s", spec.name, self._device_name)
                kernel = CompiledKernel(self._gpu_device, spec, self._device_name)
                self._kernels[spec.name] = kernel
        return kernel

    def __contains__(self, name: str) -> bool:
        return name in self._kernels

    def __len__(self) -> int:
        return len(self._kernels)


class WgpuDeviceContext:
    """
    GPU device handle plus its kernel cache.

    Parameters
    ----------
    device : Device
        The ``wgpu:<index>`` descriptor this context serves.
    gpu_device : wgpu.GPUDevice
        The device handle requested from the adapter.
    """

    def __init__(self, device: Device, gpu_device) -> None:
        self.device = device
        self.gpu_device = gpu_device
        self.kernels = KernelCache(gpu_device, str(device))

    async def run(self, spec: KernelSpec, **kwargs):
        """Compile `spec` if needed, then dispatch it (see `CompiledKernel.run`)."""
        return await self.kernels.get(spec).run(**kwargs)

    def __repr__(self) -> str:
        return f"WgpuDeviceContext(device={self.device!r}, kernels={len(self.kernels)})"


def _request_gpu_device(device: Device):
    """
    Select an adapter for `device` and request a GPU device from it.

    Adapter 0 is chosen by power preference; other indices address the
    enumerated adapter list directly.
    """
    # Registers the native backend with wgpu.gpu.
    import wgpu.backends.wgpu_native  # noqa: F401

    if device.index == 0:
        preference = os.environ.get(POWER_PREFERENCE_ENV, "high-performance")
        adapter = wgpu.gpu.request_adapter_sync(power_preference=preference)
    else:
        adapters = wgpu.gpu.enumerate_adapters_sync()
        if device.index >= len(adapters):
            raise BackendError(
                "request_adapter",
                str(device),
                f"only {len(adapters)} adapter(s) available",
            )
        adapter = adapters[device.index]
    if adapter is None:
        raise BackendError("request_adapter", str(device), "no adapter available")

    logger.debug("using adapter %s for %s", adapter.info.get("device", "?"), device)
    return adapter.request_device_sync()


class WgpuBackend:
    """
    Registry of GPU device contexts keyed by `Device`.
    """

    def __init__(self) -> None:
        self._contexts: dict[Device, WgpuDeviceContext] = {}
        self._lock = threading.Lock()

    def context(self, device: Union[str, DeviceLike]) -> WgpuDeviceContext:
        """
        Return the context for `device`, creating it on first use.

        Raises
        ------
        ValueError
            If `device` is not a wgpu device.
        BackendError
            If no adapter or device can be obtained.
        """
        device = Device(device)
        if device.type is not DeviceType.WGPU:
            raise ValueError(f"{device} is not a wgpu device")

        ctx = self._contexts.get(device)
        if ctx is not None:
            return ctx
        with self._lock:
            ctx = self._contexts.get(device)
            if ctx is None:
                try:
                    gpu_device = _request_gpu_device(device)
                except BackendError:
                    raise
                except Exception as e:
                    raise BackendError("request_device", str(device), str(e)) from e
                ctx = WgpuDeviceContext(device, gpu_device)
                self._contexts[device] = ctx
        return ctx


@lru_cache(maxsize=1)
def default_wgpu_backend() -> WgpuBackend:
    """Process-wide `WgpuBackend`."""
    return WgpuBackend()
