# src/qeinput/bands/input.py
from __future__ import annotations

from dataclasses import dataclass

from qeinput.pw.input import PathType


@dataclass(frozen=True, slots=True)
class BandsInput:
    """
    Input of bands.x (``&bands`` namelist).

    ``spin_component`` is not supported yet, so collinear spin-polarized
    runs cannot select a channel.
    """
    lsym: bool
    prefix: str | None = None
    out_dir: PathType | None = None
    filband: PathType | None = None
