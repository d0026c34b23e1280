# src/qeinput/io/writer.py
from __future__ import annotations

import os
from pathlib import Path


def write_text(text: str, path: str | os.PathLike) -> None:
    """Create or truncate ``path`` and write ``text`` as UTF-8; OSError propagates."""
    Path(path).write_text(text, encoding="utf-8")
