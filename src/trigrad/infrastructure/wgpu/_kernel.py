"""
Compiled compute kernels and their dispatch sequence.

A `CompiledKernel` owns the shader module, bind group layout and compute
pipeline for one `KernelSpec` on one GPU device. `run` performs a complete
dispatch:

1. allocate arena buffers and write every input into a device buffer
   (queue writes are fire-and-forget)
2. record a compute pass over ``ceil(invocations / WORKGROUP_SIZE)``
   workgroups, folded into an ``(x, y)`` grid when one dimension is not
   enough (kernels linearize ``gid.x + gid.y * num_workgroups.x * WG``)
3. copy every output into a ``MAP_READ`` staging buffer and submit
4. await the mapping of each staging buffer and copy it into host memory

The mapping await in step 4 is the only suspension point.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np
import wgpu

from ...domain._errors import BackendError
from ._shaders import WORKGROUP_SIZE, BindingKind, KernelSpec

logger = logging.getLogger(__name__)

MAX_WORKGROUPS_PER_DIM = 65535


def dispatch_grid(invocations: int) -> tuple[int, int]:
    """
    Workgroup counts ``(x, y)`` covering `invocations` threads.

    Raises
    ------
    ValueError
        If the grid would need more than ``MAX_WORKGROUPS_PER_DIM`` rows.
    """
    total = max(1, math.ceil(invocations / WORKGROUP_SIZE))
    if total <= MAX_WORKGROUPS_PER_DIM:
        return total, 1
    rows = math.ceil(total / MAX_WORKGROUPS_PER_DIM)
    if rows > MAX_WORKGROUPS_PER_DIM:
        raise ValueError(f"{invocations} invocations exceed a 2D dispatch")
    return MAX_WORKGROUPS_PER_DIM, rows


def _buffer_type(binding) -> str:
    if binding.is_uniform:
        return wgpu.BufferBindingType.uniform
    if binding.kind is BindingKind.INPUT:
        return wgpu.BufferBindingType.read_only_storage
    return wgpu.BufferBindingType.storage


class CompiledKernel:
    """
    A `KernelSpec` compiled for one device.

    Parameters
    ----------
    gpu_device : wgpu.GPUDevice
        Device the pipeline is created on.
    spec : KernelSpec
        Kernel description.
    device_name : str
        Device identifier used in error messages (e.g., "wgpu:0").
    """

    def __init__(self, gpu_device, spec: KernelSpec, device_name: str) -> None:
        self.spec = spec
        self._gpu_device = gpu_device
        self._device_name = device_name

        try:
            module = gpu_device.create_shader_module(label=spec.name, code=spec.code)
            entries = [
                {
                    "binding": i,
                    "visibility": wgpu.ShaderStage.COMPUTE,
                    "buffer": {"type": _buffer_type(b), "has_dynamic_offset": False},
                }
                for i, b in enumerate(spec.bindings)
            ]
            self._layout = gpu_device.create_bind_group_layout(entries=entries)
            pipeline_layout = gpu_device.create_pipeline_layout(
                bind_group_layouts=[self._layout]
            )
            self._pipeline = gpu_device.create_compute_pipeline(
                layout=pipeline_layout,
                compute={"module": module, "entry_point": "main"},
            )
        except wgpu.GPUError as e:
            raise BackendError(f"{spec.name} (compile)", device_name, str(e)) from e

    def _input_buffer(self, binding, data: np.ndarray):
        usage = wgpu.BufferUsage.COPY_DST
        usage |= wgpu.BufferUsage.UNIFORM if binding.is_uniform else wgpu.BufferUsage.STORAGE
        data = np.ascontiguousarray(data)
        buf = self._gpu_device.create_buffer(size=data.nbytes, usage=usage)
        self._gpu_device.queue.write_buffer(buf, 0, data)
        return buf

    async def run(
        self,
        *,
        invocations: int,
        inputs: Sequence[np.ndarray],
        output_lengths: Sequence[int],
        arena_words: Sequence[int] = (),
    ) -> list[np.ndarray]:
        """
        Dispatch the kernel and read every output back.

        Parameters
        ----------
        invocations : int
            Number of threads needed; the kernel guards against overshoot.
        inputs : Sequence[np.ndarray]
            One array per input binding (storage or uniform), in binding order.
        output_lengths : Sequence[int]
            Number of float32 elements of every output binding.
        arena_words : Sequence[int]
            Number of u32 words of every arena binding.

        Returns
        -------
        list[np.ndarray]
            Host copies of the outputs, float32.

        Raises
        ------
        BackendError
            On argument/binding count mismatch or any device-level failure.
        """
        spec = self.spec
        if (len(arena_words), len(inputs), len(output_lengths)) != (
            spec.arena_count,
            spec.input_count,
            spec.output_count,
        ):
            raise BackendError(spec.name, self._device_name, "binding count mismatch")

        try:
            grid_x, grid_y = dispatch_grid(invocations)
        except ValueError as e:
            raise BackendError(spec.name, self._device_name, str(e)) from e

        device = self._gpu_device
        try:
            buffers = []
            for words in arena_words:
                buffers.append(
                    device.create_buffer(
                        size=max(words, 1) * 4, usage=wgpu.BufferUsage.STORAGE
                    )
                )

            input_bindings = [b for b in spec.bindings if b.kind is BindingKind.INPUT]
            for binding, data in zip(input_bindings, inputs):
                buffers.append(self._input_buffer(binding, data))

            outputs, staging = [], []
            for length in output_lengths:
                size = length * 4
                outputs.append(
                    device.create_buffer(
                        size=size,
                        usage=wgpu.BufferUsage.STORAGE | wgpu.BufferUsage.COPY_SRC,
                    )
                )
                staging.append(
                    device.create_buffer(
                        size=size,
                        usage=wgpu.BufferUsage.MAP_READ | wgpu.BufferUsage.COPY_DST,
                    )
                )
            buffers.extend(outputs)

            bind_group = device.create_bind_group(
                layout=self._layout,
                entries=[
                    {
                        "binding": i,
                        "resource": {"buffer": buf, "offset": 0, "size": buf.size},
                    }
                    for i, buf in enumerate(buffers)
                ],
            )

            encoder = device.create_command_encoder()
            compute_pass = encoder.begin_compute_pass()
            compute_pass.set_pipeline(self._pipeline)
            compute_pass.set_bind_group(0, bind_group)
            compute_pass.dispatch_workgroups(grid_x, grid_y)
            compute_pass.end()
            for out, stage in zip(outputs, staging):
                encoder.copy_buffer_to_buffer(out, 0, stage, 0, out.size)
            device.queue.submit([encoder.finish()])

            results = []
            for stage in staging:
                await stage.map_async(wgpu.MapMode.READ)
                results.append(
                    np.frombuffer(stage.read_mapped(), dtype=np.float32).copy()
                )
                stage.unmap()
        except wgpu.GPUError as e:
            raise BackendError(spec.name, self._device_name, str(e)) from e

        logger.debug(
            "%s dispatched %dx%d workgroup(s) on %s",
            spec.name,
            grid_x,
            grid_y,
            self._device_name,
        )
        return results
