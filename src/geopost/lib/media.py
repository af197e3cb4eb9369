"""Media kind classification by filename extension."""

import os

from ..models import MediaKind

# Matched case-sensitively against the extension including its dot.
MEDIA_TYPES = {
    ".jpeg": MediaKind.IMAGE,
    ".jpg": MediaKind.IMAGE,
    ".gif": MediaKind.IMAGE,
    ".png": MediaKind.IMAGE,
    ".mov": MediaKind.VIDEO,
    ".mp4": MediaKind.VIDEO,
    ".avi": MediaKind.VIDEO,
    ".flv": MediaKind.VIDEO,
    ".wmv": MediaKind.VIDEO,
}


def media_extension(filename: str | None) -> str:
    """Return the extension of *filename*, treating a bare ``.ext`` name as one."""
    if not filename:
        return ""
    root, ext = os.path.splitext(filename)
    if not ext and root.startswith(".") and root.count(".") == 1:
        return root
    return ext


def classify(filename: str | None) -> MediaKind:
    """Map a filename to ``image``, ``video`` or ``unknown``."""
    return MEDIA_TYPES.get(media_extension(filename), MediaKind.UNKNOWN)
