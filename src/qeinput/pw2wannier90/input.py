# src/qeinput/pw2wannier90/input.py
from __future__ import annotations

from dataclasses import dataclass

from qeinput.pw.input import PathType


@dataclass(frozen=True, slots=True)
class Pw2Wannier90Input:
    """
    Input of pw2wannier90.x (``&inputpp`` namelist).

    ``prefix`` is optional for pw.x and bands.x but required here: the
    pw2wannier90.x default differs from theirs. ``spin_component`` is not
    supported yet.
    """
    prefix: str
    seedname: str
    write_unk: bool
    write_amn: bool
    write_mmn: bool
    write_spn: bool
    out_dir: PathType | None = None
