"""
Concrete Tensor implementation.

A `Tensor` is an N-dimensional autodiff node. Its values and gradient live in
flat float32 NumPy buffers with axis 0 varying fastest (Fortran order), and
its shape is a tuple of positive ints whose product is the buffer length.

The class itself only holds state and shared helpers. Every operation is
declared on a mixin and implemented per backend through the tensor
control-path manager, which dispatches on the tensor's `DeviceType`:

- ``"cpu"``          : reference backend, synchronous NumPy code
- ``"native"``       : precompiled kernels called through ctypes
- ``"wgpu:<index>"`` : compute shaders; operations and ``backward`` return
                       awaitables

Operands are validated (device, total length) before anything is allocated,
so a failing operation creates no node and leaves every existing buffer
untouched.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._errors import (
    ConstructionError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    ShapeMismatchError,
)
from ...domain._ops import OpKind
from ...domain.device._device import Device, DeviceType
from ...domain.device._device_protocol import DeviceLike
from ..autograd._context import Context
from ..utils._indexing import total_length
from ..utils._random import LinearCongruentialGenerator

from .mixins.arithmetic import TensorMixinArithmetic
from .mixins.unary import TensorMixinUnary
from .mixins.reduction import TensorMixinReduction
from .mixins.autograd import TensorMixinAutograd

Number = Union[int, float]


def _validate_shape(shape: Sequence[int]) -> tuple[int, ...]:
    try:
        dims = tuple(int(s) for s in shape)
    except TypeError as e:
        raise ConstructionError(f"shape must be a sequence of ints, got {shape!r}") from e
    if len(dims) == 0:
        raise ConstructionError("shape must have at least one axis")
    if any(s <= 0 for s in dims):
        raise ConstructionError(f"every axis extent must be positive, got {dims}")
    return dims


class Tensor(
    TensorMixinArithmetic,
    TensorMixinUnary,
    TensorMixinReduction,
    TensorMixinAutograd,
):
    """
    N-dimensional autodiff node.

    Parameters
    ----------
    shape : Sequence[int]
        Non-empty sequence of positive axis extents.
    values : Optional[Sequence[float]], optional
        Flat values, axis 0 fastest. Defaults to zeros.
    device : Union[str, DeviceLike], optional
        Backend the tensor lives on. Defaults to ``"cpu"``.
    label : str, optional
        Diagnostic label shown by ``str()``.
    ctx : Optional[Context], optional
        Backward context. Set by operations; leaves have none.
    gpu_context : optional
        `WgpuDeviceContext` for ``wgpu`` tensors. Resolved from the default
        backend on first use when omitted.

    Raises
    ------
    ConstructionError
        If the shape is invalid, `values` is not flat, or its length differs
        from ``total_length(shape)``.
    """

    def __init__(
        self,
        shape: Sequence[int],
        values: Optional[Sequence[float]] = None,
        *,
        device: Union[str, DeviceLike] = "cpu",
        label: str = "",
        ctx: Optional[Context] = None,
        gpu_context: Any = None,
    ) -> None:
        self._shape = _validate_shape(shape)
        self._device = Device(device)
        n = total_length(self._shape)

        if values is None:
            self._values = np.zeros(n, dtype=np.float32)
        else:
            arr = np.array(values, dtype=np.float32)
            if arr.ndim != 1:
                raise ConstructionError(
                    f"values must be a flat sequence, got an array of rank {arr.ndim}; "
                    "use Tensor.from_numpy for N-d arrays"
                )
            if arr.size != n:
                raise ConstructionError(
                    f"values has {arr.size} element(s) but shape {self._shape} "
                    f"requires {n}"
                )
            self._values = arr

        self._gradient = np.zeros(n, dtype=np.float32)
        self._ctx = ctx
        self.label = label
        self._gpu_context = gpu_context

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def _state(self) -> DeviceType:
        """Dispatch key for the control-path manager."""
        return self._device.type

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def size(self) -> int:
        """Total number of elements."""
        return self._values.size

    @property
    def device(self) -> Device:
        return self._device

    @property
    def values(self) -> np.ndarray:
        """Flat float32 value buffer (axis 0 fastest)."""
        return self._values

    @property
    def gradient(self) -> np.ndarray:
        """Flat float32 gradient buffer, same layout as `values`."""
        return self._gradient

    @property
    def ctx(self) -> Optional[Context]:
        return self._ctx

    @property
    def parents(self) -> tuple["Tensor", ...]:
        return tuple(self._ctx.parents) if self._ctx is not None else ()

    @property
    def op(self) -> str:
        return self._ctx.op.value if self._ctx is not None else ""

    @property
    def gpu_context(self):
        """
        The `WgpuDeviceContext` this tensor dispatches on.

        Raises
        ------
        DeviceNotSupportedError
            If the tensor does not live on a wgpu device.
        """
        if not self._device.is_wgpu():
            raise DeviceNotSupportedError("gpu_context", str(self._device))
        if self._gpu_context is None:
            from ..wgpu._context import default_wgpu_backend

            self._gpu_context = default_wgpu_backend().context(self._device)
        return self._gpu_context

    def zero_grad(self) -> None:
        self._gradient = np.zeros(self.size, dtype=np.float32)

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the values as an N-d array (Fortran-ordered view of the buffer)."""
        return np.reshape(self._values, self._shape, order="F").copy()

    # ------------------------------------------------------------------
    # Helpers shared by the control paths
    # ------------------------------------------------------------------
    @staticmethod
    def _as_tensor_like(x: Union["Tensor", Number], like: "Tensor") -> "Tensor":
        """
        Return `x` unchanged if it is a tensor, otherwise a filled leaf with
        the shape and device of `like`.
        """
        if isinstance(x, Tensor):
            return x
        if isinstance(x, (int, float, np.floating, np.integer)):
            return type(like).filled(
                float(x), like.shape, device=like.device, gpu_context=like._gpu_context
            )
        raise TypeError(f"unsupported operand type: {type(x).__name__}")

    def _binary_operand(self, op: OpKind, other: Union["Tensor", Number]) -> "Tensor":
        """
        Promote and validate the second operand of a binary op.

        Raises
        ------
        DeviceMismatchError
            If the operands live on different devices.
        ShapeMismatchError
            If the operands differ in total length.
        """
        other_t = self._as_tensor_like(other, self)
        if other_t.device != self.device:
            raise DeviceMismatchError(str(self.device), str(other_t.device))
        if other_t.size != self.size:
            raise ShapeMismatchError(op.value, self.shape, other_t.shape)
        return other_t

    def _result(
        self,
        values: np.ndarray,
        ctx: Context,
        shape: Optional[Sequence[int]] = None,
    ) -> "Tensor":
        """Wrap a freshly computed buffer into a new node on this tensor's device."""
        return type(self)(
            self.shape if shape is None else shape,
            values,
            device=self.device,
            ctx=ctx,
            gpu_context=self._gpu_context,
        )

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def filled(
        cls,
        value: float,
        shape: Sequence[int],
        *,
        device: Union[str, DeviceLike] = "cpu",
        label: str = "",
        gpu_context: Any = None,
    ) -> "Tensor":
        """Leaf tensor with every element set to `value`."""
        dims = _validate_shape(shape)
        values = np.full(total_length(dims), value, dtype=np.float32)
        return cls(dims, values, device=device, label=label, gpu_context=gpu_context)

    @classmethod
    def zeros(cls, shape: Sequence[int], **kwargs) -> "Tensor":
        return cls.filled(0.0, shape, **kwargs)

    @classmethod
    def ones(cls, shape: Sequence[int], **kwargs) -> "Tensor":
        return cls.filled(1.0, shape, **kwargs)

    @classmethod
    def random(
        cls,
        shape: Sequence[int],
        *,
        min: float = 0.0,
        max: float = 1.0,
        seed: Optional[int] = None,
        generator: Optional[LinearCongruentialGenerator] = None,
        device: Union[str, DeviceLike] = "cpu",
        label: str = "",
    ) -> "Tensor":
        """
        Leaf tensor of pseudo-random values in ``[min, max)``.

        Parameters
        ----------
        shape : Sequence[int]
            Tensor shape.
        min, max : float, optional
            Value range.
        seed : Optional[int], optional
            Seed for a fresh generator. Ignored when `generator` is given.
            Drawn from system entropy when both are omitted.
        generator : Optional[LinearCongruentialGenerator], optional
            Shared generator, advanced by ``total_length(shape)`` steps.
        """
        dims = _validate_shape(shape)
        gen = generator if generator is not None else LinearCongruentialGenerator(seed)
        values = [gen.uniform(min, max) for _ in range(total_length(dims))]
        return cls(dims, values, device=device, label=label)

    @classmethod
    def linear_space(
        cls,
        start: float,
        end: float,
        steps: int,
        *,
        device: Union[str, DeviceLike] = "cpu",
        label: str = "",
    ) -> "Tensor":
        """
        Rank-1 leaf of `steps` evenly spaced values from `start` to `end`,
        both ends included.
        """
        if steps < 1:
            raise ConstructionError(f"steps must be positive, got {steps}")
        if steps == 1:
            values = [start]
        else:
            step = (end - start) / (steps - 1)
            values = [start + i * step for i in range(steps)]
        return cls((steps,), values, device=device, label=label)

    @classmethod
    def from_numpy(
        cls,
        array: np.ndarray,
        *,
        device: Union[str, DeviceLike] = "cpu",
        label: str = "",
    ) -> "Tensor":
        """Leaf tensor holding a copy of an N-d array (laid out axis 0 fastest)."""
        arr = np.asarray(array, dtype=np.float32)
        if arr.ndim == 0:
            arr = arr.reshape(1)
        return cls(arr.shape, arr.ravel(order="F"), device=device, label=label)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------
    def __str__(self) -> str:
        prefix = f"{self.label}:" if self.label else ""
        body = ", ".join(f"{float(v):g}" for v in self._values)
        return f"<{prefix}{body}>"

    def __repr__(self) -> str:
        return (
            f"Tensor(shape={self._shape}, device={self._device}, "
            f"op={self.op!r}, label={self.label!r})"
        )
