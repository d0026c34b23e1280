# src/qeinput/fields.py
"""
Text forms shared by every namelist renderer.

Numbers use the shortest decimal text that reads back to the same float.
Most fields are written positionally (no exponent, ``3.0`` -> ``3``); the
handful of thresholds that pw.x expects in exponent form go through
:func:`fmt_sci`.
"""
from __future__ import annotations

import os
from typing import Type

import numpy as np

from qeinput.error import PathEncodingError

INDENT = "    "

TRUE = ".true."
FALSE = ".false."


def fmt_float(x: float) -> str:
    """Default text form: ``3.0 -> '3'``, ``1e-8 -> '0.00000001'``."""
    return np.format_float_positional(float(x), trim="-")


def fmt_sci(x: float) -> str:
    """Exponent form: ``1e-8 -> '1e-8'``, ``150.0 -> '1.5e2'``."""
    s = np.format_float_scientific(float(x), trim="-", exp_digits=1)
    return s.replace("e+", "e")


def fmt_bool(b: bool) -> str:
    return TRUE if b else FALSE


def quoted(s: str) -> str:
    return f"'{s}'"


def field_line(name: str, value: str) -> str:
    return f"{INDENT}{name}={value},"


def push_bool_field(lines: list[str], name: str, b: bool | None) -> None:
    """Append ``name=.true.,`` / ``name=.false.,``; nothing when ``b`` is None."""
    if b is None:
        return
    lines.append(field_line(name, fmt_bool(b)))


def path_text(path: str | bytes | os.PathLike, error: Type[PathEncodingError]) -> str:
    """
    Return ``path`` as UTF-8 representable text or raise ``error``.

    Undecodable bytes from the filesystem show up either as raw bytes or as
    lone surrogates (``surrogateescape``); both are rejected.
    """
    raw = os.fspath(path)
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise error(path) from exc
    try:
        raw.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise error(path) from exc
    return raw
