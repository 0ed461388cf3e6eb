from ._native_loader import load_trigrad_native

__all__ = [
    load_trigrad_native.__name__,
]
