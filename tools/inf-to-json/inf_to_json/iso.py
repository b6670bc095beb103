"""Read a single INF straight out of a driver ISO image (e.g. virtio-win.iso)."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from .errors import DocumentReadError


# Joliet preserves the mixed-case names driver ISOs are authored with; fall back
# to Rock Ridge and finally plain ISO9660 identifiers.
_PATH_MODES = ("joliet", "rr", "iso")


def _normalize_iso_path(path: str) -> str:
    """
    Normalize ISO paths for comparison.

    - ensure forward slashes
    - strip ISO9660 version suffixes like `;1`
    - compare case-insensitively by lowercasing
    """

    p = path.strip()
    if not p:
        return p
    p = p.replace("\\", "/")
    if not p.startswith("/"):
        p = "/" + p
    if p.endswith(";1"):
        p = p[:-2]
    return p.lower()


def _find_iso_file(iso: Any, mode: str, want: str, errors: tuple[type[BaseException], ...]) -> str | None:
    try:
        for root, _dirs, filelist in iso.walk(**{f"{mode}_path": "/"}):
            for f in filelist:
                p = f"{root.rstrip('/')}/{f}"
                if _normalize_iso_path(p) == want:
                    return p
    except errors:
        # The image has no such namespace (e.g. no Joliet extension).
        return None
    return None


def read_iso_file(iso_path: Path, inner_path: str) -> bytes:
    try:
        import pycdlib  # type: ignore
        from pycdlib.pycdlibexception import PyCdlibException  # type: ignore
    except ModuleNotFoundError as e:
        raise DocumentReadError(
            "pycdlib is not installed; install it to read INFs from ISO images:\n"
            "  python3 -m pip install pycdlib"
        ) from e

    if not iso_path.is_file():
        raise DocumentReadError(f"ISO image not found: {iso_path.as_posix()}")

    want = _normalize_iso_path(inner_path)
    if not want or want == "/":
        raise DocumentReadError(f"invalid path inside ISO image: {inner_path!r}")

    pycdlib_errors = (PyCdlibException,)
    iso = pycdlib.PyCdlib()
    try:
        iso.open(str(iso_path))
    except (OSError, *pycdlib_errors) as e:
        raise DocumentReadError(f"failed to open ISO image {iso_path.as_posix()}: {e}") from e

    try:
        for mode in _PATH_MODES:
            hit = _find_iso_file(iso, mode, want, pycdlib_errors)
            if hit is None:
                continue
            buf = io.BytesIO()
            try:
                iso.get_file_from_iso_fp(buf, **{f"{mode}_path": hit})
            except pycdlib_errors as e:
                raise DocumentReadError(f"failed to read {hit} from {iso_path.as_posix()}: {e}") from e
            return buf.getvalue()
    finally:
        iso.close()

    raise DocumentReadError(f"{inner_path} not found in ISO image {iso_path.as_posix()}")
