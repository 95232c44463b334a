"""Character encoding name normalization and decoding helpers."""

from __future__ import annotations

import codecs
import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^0-9a-z]")


def lenient_name(encoding: Optional[str]) -> Optional[str]:
    """Lower-case ``encoding`` and drop everything but letters and digits."""
    if encoding is None:
        return None
    name = _NON_ALNUM.sub("", encoding.strip().lower())
    return name or None


def codec_name(encoding: Optional[str]) -> Optional[str]:
    """Canonical Python codec name for ``encoding`` or None when unknown."""
    if not encoding:
        return None
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        return None


def normalize_encoding(encoding: Optional[str]) -> Optional[str]:
    """Collapse equivalent spellings of an encoding name.

    Big-endian variants map to their endian-unspecified alias and UCS-2 maps to
    UTF-16.  Names Python does not know are returned in lenient form.
    """
    normalized = lenient_name(encoding)
    if normalized:
        if normalized.endswith("be"):
            normalized = normalized[: -len("be")]
        if normalized.startswith("ucs2"):
            normalized = "utf16" + normalized[len("ucs2"):]
        # Python's alias table needs separators for some names, e.g. windows-1252.
        canonical = codec_name(normalized) or codec_name(encoding.strip())
        if canonical is not None:
            normalized = canonical
    return normalized


def decode(data: bytes, encoding: Optional[str], errors: str = "strict") -> str:
    """Decode ``data``; raises LookupError/UnicodeDecodeError like ``bytes.decode``."""
    name = codec_name(encoding)
    if name is None:
        raise LookupError(f"Unknown encoding: {encoding!r}")
    return data.decode(name, errors=errors)


def try_decode(data: bytes, encoding: Optional[str]) -> Optional[str]:
    """Strict decode that returns None instead of raising."""
    try:
        return decode(data, encoding)
    except (LookupError, UnicodeDecodeError, ValueError):
        return None
