"""
Device abstraction contracts for trigrad.

This module defines a duck-typed `DeviceLike` protocol that represents a
computation device descriptor without coupling to the concrete `Device`
class. Code that only needs to inspect a device's category or print it can
type against this protocol.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class DeviceLike(Protocol):
    """
    Duck-typed device contract.

    Any object that provides these members can be used as a computation
    device descriptor, regardless of its concrete class identity.
    """

    type: object
    index: Optional[int]

    def is_cpu(self) -> bool: ...
    def is_native(self) -> bool: ...
    def is_wgpu(self) -> bool: ...
    def __str__(self) -> str: ...
