"""
Construction-, shape- and device-related exceptions for trigrad.

This module defines the error taxonomy shared by every node type and every
backend. All of these errors are raised synchronously, before a new node is
created and before any existing gradient buffer is touched, so a graph that
was valid before a failing call remains valid and inspectable afterwards.

Taxonomy
--------
- ``ConstructionError``       : a node was described inconsistently
                                (bad shape, buffer length mismatch).
- ``ShapeMismatchError``      : operands of an elementwise op disagree in
                                total length.
- ``BackendError``            : a foreign call, device request or buffer
                                mapping failed while executing an operation.
- ``DeviceNotSupportedError`` : no implementation is registered for the
                                receiver's device.
- ``DeviceMismatchError``     : operands live on different devices.
"""

from typing import Optional


class ConstructionError(ValueError):
    """
    Raised when a node cannot be constructed from the given description.

    Typical causes are an empty shape, a non-positive axis extent, or a
    values buffer whose length disagrees with the product of the shape.
    """


class ShapeMismatchError(ValueError):
    """
    Raised when a binary elementwise operation receives operands whose
    total lengths differ.

    Attributes
    ----------
    op : str
        Name of the operation that was attempted (e.g., "add").
    left : tuple[int, ...]
        Shape of the receiver.
    right : tuple[int, ...]
        Shape of the other operand.
    """

    def __init__(self, op: str, left: tuple, right: tuple) -> None:
        super().__init__(
            f"{op}: operands must have equal total length, got shapes "
            f"{left} and {right}."
        )
        self.op = op
        self.left = left
        self.right = right


class BackendError(RuntimeError):
    """
    Raised when a compute backend fails to execute an operation.

    This covers native library load failures, non-zero status codes returned
    by native kernels, missing GPU adapters, and device-level failures while
    dispatching or reading back GPU buffers.

    Attributes
    ----------
    op : str
        The operation being executed (e.g., "mul", "sum.backward").
    device : str
        String form of the device the operation ran on.
    """

    def __init__(self, op: str, device: str, detail: Optional[str] = None) -> None:
        """
        Initialize the BackendError.

        Parameters
        ----------
        op : str
            Operation name.
        device : str
            Device identifier (e.g., "native", "wgpu:0").
        detail : Optional[str]
            Backend-specific failure description.
        """
        message = f"{op} failed on device '{device}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.op = op
        self.device = device


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when a method has no implementation for the receiver's device.

    Attributes
    ----------
    op : str
        Method name (e.g., "sum", "gpu_context").
    device : str
        Device the receiver lives on.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


class DeviceMismatchError(RuntimeError):
    """
    Raised when the operands of a binary op live on different devices.

    Buffers are never moved between backends implicitly.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b
