"""
Locating and opening the trigrad native kernel library.

The library is looked up in this order:

1. the ``lib_path`` argument of `load_trigrad_native`
2. the ``TRIGRAD_NATIVE_LIB`` environment variable
3. the package directory next to this module, trying the OpenMP build
   (``*_omp``), then the single-threaded build (``*_noomp``), then the
   plain name

Only the first two are exclusive: an explicit path that does not exist is an
error, it never falls through to the package directory.

On Windows, Python no longer searches ``PATH`` for the dependencies of a DLL.
The library's own directory, plus ``TRIGRAD_MINGW_BIN`` when set, is added
with ``os.add_dll_directory``. The handles are stored on the returned
``CDLL`` so the directories stay registered while the library is in use.

Function signatures are declared by the ``*_ctypes`` modules, not here.
"""

from __future__ import annotations

import ctypes
import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

LIB_PATH_ENV = "TRIGRAD_NATIVE_LIB"
MINGW_BIN_ENV = "TRIGRAD_MINGW_BIN"

VARIANTS = ("omp", "noomp", "default")


def _variant_lib_name(variant: str) -> str:
    """
    File name of one library build on the current platform.

    >>> _variant_lib_name("omp")  # on Linux
    'libtrigrad_native_omp.so'
    """
    key = variant.lower()
    if key not in VARIANTS:
        raise ValueError(f"Unknown variant: {variant!r}")
    stem = "trigrad_native" if key == "default" else f"trigrad_native_{key}"

    if sys.platform.startswith("win"):
        return f"{stem}.dll"
    ext = "dylib" if sys.platform == "darwin" else "so"
    return f"lib{stem}.{ext}"


def _bundled_candidates() -> Iterator[Path]:
    here = Path(__file__).resolve().parent
    for variant in VARIANTS:
        yield here / _variant_lib_name(variant)


def _register_dll_directories(lib_dir: Path) -> list:
    if not (sys.platform.startswith("win") and hasattr(os, "add_dll_directory")):
        return []
    handles = [os.add_dll_directory(str(lib_dir))]
    extra = os.environ.get(MINGW_BIN_ENV, "")
    if extra:
        try:
            handles.append(os.add_dll_directory(extra))
        except OSError as e:
            raise OSError(
                f"{MINGW_BIN_ENV}={extra!r} is not a usable DLL directory: "
                f"{getattr(e, 'strerror', e)}"
            ) from e
    return handles


def _load_cdll_with_windows_dirs(dll_path: Path) -> ctypes.CDLL:
    if not dll_path.exists():
        raise FileNotFoundError(f"Native library not found: {dll_path}")

    handles = _register_dll_directories(dll_path.parent)
    try:
        lib = ctypes.CDLL(str(dll_path))
    except OSError as e:
        raise OSError(f"could not open {str(dll_path)!r}: {e}") from e

    logger.debug("loaded native library %s", dll_path)
    lib._trigrad_dll_dir_handles = handles
    return lib


@lru_cache(maxsize=1)
def load_trigrad_native(lib_path: Optional[str] = None) -> ctypes.CDLL:
    """
    Open the native kernel library, once per process.

    Parameters
    ----------
    lib_path : Optional[str]
        Library file to open. Overrides the environment and skips the search.

    Returns
    -------
    ctypes.CDLL
        The opened library.

    Raises
    ------
    FileNotFoundError
        If an explicitly requested file (argument or environment) is missing.
    OSError
        If no bundled build exists or none of them can be opened. The message
        lists every path that was tried.
    """
    explicit = lib_path or os.environ.get(LIB_PATH_ENV) or None
    if explicit is not None:
        return _load_cdll_with_windows_dirs(Path(explicit).resolve())

    tried: list[str] = []
    for candidate in _bundled_candidates():
        if not candidate.exists():
            tried.append(f"- {candidate} (missing)")
            continue
        try:
            return _load_cdll_with_windows_dirs(candidate)
        except OSError as e:
            tried.append(f"- {candidate} ({e})")

    raise OSError("No trigrad native library could be opened. Tried:\n" + "\n".join(tried))
