"""
Backend implementations of `TensorMixinAutograd.backward`.

Each backend plugs its own backward step into the shared graph scheduler.
The GPU path returns a coroutine that awaits every step in turn.
"""

from ..._tensor_builder import tensor_control_path_manager
from ....autograd._graph import run_backward, run_backward_async
from ....ops.autograd_cpu import backward_step as cpu_backward_step, seed_ones
from .....domain.device._device import DeviceType

from ._base import TensorMixinAutograd as TMG


@tensor_control_path_manager(TMG, TMG.backward, DeviceType.CPU)
def tensor_backward_cpu(self) -> None:
    run_backward(self, seed=seed_ones, step=cpu_backward_step)


@tensor_control_path_manager(TMG, TMG.backward, DeviceType.NATIVE)
def tensor_backward_native(self) -> None:
    from ....ops.native_ext import backward_step

    run_backward(self, seed=seed_ones, step=backward_step)


@tensor_control_path_manager(TMG, TMG.backward, DeviceType.WGPU)
def tensor_backward_wgpu(self):
    """
    Asynchronous backward pass.

    Returns
    -------
    Coroutine
        Awaits one backward kernel per node, in reverse topological order,
        and replaces each parent's gradient with the buffer read back.
    """
    from ....ops.wgpu_ext import backward_step

    return run_backward_async(self, seed=seed_ones, step=backward_step)
