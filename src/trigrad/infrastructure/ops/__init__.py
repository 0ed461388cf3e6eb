"""
Backend kernels with Tensor boundaries.

- ``autograd_cpu`` / ``reduce_cpu``: reference NumPy implementations
- ``native_ext``: ctypes calls into the precompiled library
- ``wgpu_ext``: compute-shader dispatch (imports ``wgpu``)

Modules are imported directly by the control paths that need them.
"""
