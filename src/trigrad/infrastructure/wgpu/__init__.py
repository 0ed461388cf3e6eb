"""
GPU compute backend built on wgpu-py.

Importing this package imports ``wgpu``; the tensor layer only does so when a
tensor on a ``wgpu:<index>`` device is actually used.
"""

from ._context import KernelCache, WgpuBackend, WgpuDeviceContext, default_wgpu_backend
from ._kernel import CompiledKernel
from ._shaders import KernelSpec

__all__ = [
    KernelCache.__name__,
    WgpuBackend.__name__,
    WgpuDeviceContext.__name__,
    default_wgpu_backend.__name__,
    CompiledKernel.__name__,
    KernelSpec.__name__,
]
