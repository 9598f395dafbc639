"""Filename sanitising and safe path joining.

Submissions name files to upload and audit dumps are named after submission
ids; both come from untrusted input and must never escape their directory."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
MAX_FILENAME_LENGTH = 128


class UnsafePathError(ValueError):
    """Raised when a path would resolve outside its base directory."""

    pass


def sanitize_filename(name: str, default: str = "file") -> str:
    """Reduce a name to a safe single path component.

    Accents are stripped, runs of unsafe characters become "_", leading dots
    are removed and the result is truncated.
    """
    normalized = unicodedata.normalize("NFKD", str(name)).encode("ascii", "ignore").decode("ascii")
    cleaned = _UNSAFE_CHARS.sub("_", normalized).strip("._")
    cleaned = cleaned[:MAX_FILENAME_LENGTH]
    return cleaned or default


def safe_join(base_dir: str | Path, filename: str) -> Path:
    """Join `filename` onto `base_dir`, rejecting traversal.

    `filename` must be a single path component.

    Raises:
        UnsafePathError: if filename holds separators or the result is not inside base_dir
    """
    base = Path(base_dir).resolve()
    normalized = str(filename).replace("\\", "/")
    component = Path(normalized).name
    if component in ("", ".", "..") or component != normalized:
        raise UnsafePathError(f"Invalid file name: {filename!r}")
    candidate = (base / component).resolve()
    if candidate.parent != base:
        raise UnsafePathError(f"Path {filename!r} escapes {base}")
    return candidate
