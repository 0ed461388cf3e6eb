"""
Device-keyed method dispatch through decorators.

A class declares a method once, with the signature and docstring callers
see. Backends then attach their own implementation of that method for one
dispatch key each:

    register = create_path_builder()

    class Node:
        @property
        def _state(self): ...

        def scale(self, k: float): ...

    @register(Node, Node.scale, "cpu")
    def scale_cpu(self, k: float): ...

The first registration swaps the declared method for a wrapper that reads
``self._state`` on every call and forwards to ``impl(self, *args, **kwargs)``.
Later registrations only add entries to the table.

Registrations live in a table private to one `create_path_builder()` call;
two builders never see each other's paths. Implementations may be coroutine
functions, in which case the dispatched call returns an awaitable.
"""

from typing import (
    runtime_checkable,
    Callable,
    Hashable,
    Optional,
    Protocol,
    Dict,
    Type,
    Any,
)
from typing_extensions import ParamSpec, TypeVar
from collections import namedtuple
from functools import wraps

from abc import abstractmethod

P = ParamSpec("P")
R = TypeVar("R")

MissingPathHandler = Callable[[Any, Callable[..., Any]], Any]
"""Called as ``handler(self, method)`` when no control path matches; must raise."""

PathKey = namedtuple("PathKey", ["owner", "method", "state"])


@runtime_checkable
class Dispatchable(Protocol):
    """Anything exposing the ``_state`` value dispatch is keyed on."""

    @property
    @abstractmethod
    def _state(self) -> Optional[Any]: ...


def create_path_builder(
    on_missing: Optional[MissingPathHandler] = None,
) -> Callable[
    [Type, Callable[P, R], Hashable],
    Callable[[Callable[P, R]], Callable[P, R]],
]:
    """
    Return a ``register(cls, method, state)`` decorator factory.

    Parameters
    ----------
    on_missing : Optional[MissingPathHandler]
        Invoked with the instance and the declared method when the instance's
        ``_state`` has no registered implementation. Expected to raise; if it
        returns, `NotImplementedError` is raised instead.

    Returns
    -------
    Callable
        ``register(cls, method, state) -> decorator``.
    """
    paths: Dict[PathKey, Callable] = {}

    def register(
        cls: Type,
        method: Callable[P, R],
        state: Hashable,
    ) -> Callable[[Callable[P, R]], Callable[P, R]]:
        """
        Parameters
        ----------
        cls : Type
            Class owning the declared method. The wrapper is installed on it.
        method : Callable[P, R]
            The declared method, or a wrapper already installed for it.
        state : Hashable
            Dispatch key the decorated implementation serves.

        Raises
        ------
        TypeError
            If `state` cannot be hashed.
        """
        try:
            hash(state)
        except TypeError:
            raise TypeError(f"Control path state must be hashable. Got {state!r}")

        declared = getattr(method, "__control_path_base__", method)
        key = PathKey(cls.__name__, declared.__name__, state)

        def decorator(impl: Callable[P, R]) -> Callable[P, R]:
            paths[key] = impl

            installed = cls.__dict__.get(declared.__name__)
            if getattr(installed, "__control_path_base__", None):
                return impl

            @wraps(declared)
            def dispatch(self: Any, *args: P.args, **kwargs: P.kwargs) -> Any:
                if not isinstance(self, Dispatchable):
                    raise NotImplementedError(
                        f"{type(self)} is missing attribute '_state' (@property)"
                    )
                current = self._state
                found = paths.get(PathKey(cls.__name__, declared.__name__, current))
                if found is not None:
                    return found(self, *args, **kwargs)
                if on_missing is not None:
                    on_missing(self, declared)
                raise NotImplementedError(
                    f"Missing control path (state={current!r}) for {declared!r}"
                )

            dispatch.__control_path_base__ = declared
            setattr(cls, declared.__name__, dispatch)
            return impl

        return decorator

    return register
