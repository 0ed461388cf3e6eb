"""
Device descriptors.

A tensor lives on exactly one of three backends:

- ``"cpu"``          : NumPy reference implementation in this process
- ``"native"``       : precompiled kernels reached through ctypes
- ``"wgpu:<index>"`` : compute shaders on GPU adapter ``<index>`` via wgpu-py

`Device` is a plain value. It owns no backend resource; it is what tensor
methods dispatch on and what GPU contexts are cached by.
"""

from enum import Enum
import re
from typing import Union

from ._device_protocol import DeviceLike


class DeviceType(Enum):
    """
    Backend category of a `Device`.

    Attributes
    ----------
    CPU : DeviceType
        Synchronous NumPy reference backend.
    NATIVE : DeviceType
        ctypes-accelerated backend.
    WGPU : DeviceType
        Asynchronous WebGPU backend.
    """

    CPU = "cpu"
    NATIVE = "native"
    WGPU = "wgpu"


class Device:
    """
    Parsed device identifier.

    Parameters
    ----------
    device : str or DeviceLike
        ``"cpu"``, ``"native"`` or ``"wgpu:<index>"`` with a non-negative
        integer index. Passing a `Device` copies it; any other `DeviceLike`
        is parsed from its ``str()``.

    Raises
    ------
    ValueError
        For any other string.

    Notes
    -----
    Two devices are equal when both ``type`` and ``index`` match; ``index``
    is None except for wgpu devices.
    """

    __slots__ = ("type", "index")

    _WGPU_PATTERN = re.compile(r"^wgpu:(\d+)$")
    _FIXED = {"cpu": DeviceType.CPU, "native": DeviceType.NATIVE}

    def __init__(self, device: Union[str, DeviceLike]):
        if isinstance(device, Device):
            self.type, self.index = device.type, device.index
            return
        if isinstance(device, DeviceLike):
            device = str(device)
        fixed = self._FIXED.get(device)
        if fixed is not None:
            self.type, self.index = fixed, None
            return
        m = self._WGPU_PATTERN.match(str(device))
        if m is None:
            raise ValueError(
                f"Invalid device '{device}'. "
                "Expected 'cpu', 'native' or 'wgpu:<index>'"
            )
        self.type, self.index = DeviceType.WGPU, int(m.group(1))

    def __str__(self) -> str:
        if self.type is DeviceType.WGPU:
            return f"wgpu:{self.index}"
        return self.type.value

    def __repr__(self) -> str:
        return f"Device('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return self.type is other.type and self.index == other.index

    def __hash__(self) -> int:
        return hash((self.type, self.index))

    def is_cpu(self) -> bool:
        return self.type is DeviceType.CPU

    def is_native(self) -> bool:
        return self.type is DeviceType.NATIVE

    def is_wgpu(self) -> bool:
        return self.type is DeviceType.WGPU
