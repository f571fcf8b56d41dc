from __future__ import annotations

import re
import secrets
import time

_UNSAFE = re.compile(r"[^a-z0-9.\-_]+")
MAX_FILENAME_LENGTH = 64


def sanitize_filename(name: str) -> str:
    return _UNSAFE.sub("-", name.lower())[:MAX_FILENAME_LENGTH]


def file_extension(filename: str) -> str:
    _, dot, ext = filename.rpartition(".")
    return ext.lower() if dot and ext else "bin"


def generate_object_name(filename: str) -> str:
    """``{epoch_ms}-{8 hex}.{ext}`` for the given upload name."""
    epoch_ms = int(time.time() * 1000)
    return sanitize_filename(f"{epoch_ms}-{secrets.token_hex(4)}.{file_extension(filename)}")
