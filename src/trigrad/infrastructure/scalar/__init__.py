from ._scalar import Scalar, as_scalars

__all__ = [
    Scalar.__name__,
    as_scalars.__name__,
]
