"""Local blobstore holding the durable article records."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from articlerelay.errors import StorageConnectivityError

# Runtime data lives next to the package by default so a checkout is usable
# without any further configuration.
_PACKAGE_DIR = Path(__file__).resolve().parent

#: Name of the directory under :mod:`articlerelay.blobstore` that contains the data.
DEFAULT_BLOB_SUBDIR = "data"

#: Default location where article records are stored.
DEFAULT_BLOB_ROOT = _PACKAGE_DIR / DEFAULT_BLOB_SUBDIR


_Pathish = Union[str, Path]


def resolve_blob_root(blob_root: _Pathish | None = None) -> Path:
    """Return a :class:`Path` pointing at the blob root.

    ``blob_root`` may be either a string or :class:`Path`.  When ``None`` is
    provided, :data:`DEFAULT_BLOB_ROOT` is returned.  The path is not created on
    disk; callers can use :func:`ensure_blob_root` if they need to create it.
    """

    if blob_root is None:
        return DEFAULT_BLOB_ROOT
    if isinstance(blob_root, Path):
        return blob_root
    return Path(blob_root)


def ensure_blob_root(blob_root: _Pathish | None = None) -> Path:
    """Ensure the blob root exists and return it as a :class:`Path`."""

    root = resolve_blob_root(blob_root)
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageConnectivityError(f"Cannot prepare blob root {root}: {exc}") from exc
    return root


from .articles import ArticleStore  # noqa: E402

__all__ = [
    "ArticleStore",
    "DEFAULT_BLOB_ROOT",
    "DEFAULT_BLOB_SUBDIR",
    "ensure_blob_root",
    "resolve_blob_root",
]
