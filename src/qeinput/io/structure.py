# src/qeinput/io/structure.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np
from ase import Atoms
from ase.constraints import FixAtoms
from ase.data import atomic_masses, atomic_numbers
from ase.io import read
from ase.units import Bohr

from qeinput.pw.input import (
    AtomCoordinate,
    Cell,
    LatticeUnits,
    PositionCoordinateType,
    Positions,
    Species,
)

# Coordinate systems that can be taken straight from an Atoms object.
_SUPPORTED = (PositionCoordinateType.ANGSTROM_CARTESIAN, PositionCoordinateType.CRYSTAL)


def read_structure(path: str | Path, format: str | None = None, index: int = 0) -> Atoms:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Structure file not found: {p}")
    atoms = read(p, format=format, index=index)
    if not isinstance(atoms, Atoms):
        raise ValueError(f"Expected a single structure in {p}.")
    return atoms


def cell_from_atoms(atoms: Atoms, alat: float | None = None) -> Cell:
    """
    Cell vectors of ``atoms``.

    Without ``alat`` the vectors are returned in angstrom, as ASE stores
    them. With ``alat`` (in bohr, i.e. ``celldm(1)``) they are scaled to
    alat units, which is the only ``CELL_PARAMETERS`` form pw.x accepts
    together with ``celldm(1)``.
    """
    cell = np.asarray(atoms.get_cell().array, float)
    if cell.shape != (3, 3):
        raise ValueError(f"cell must be 3x3; got shape {cell.shape}")

    units = LatticeUnits.ANGSTROM
    if alat is not None:
        if not alat > 0.0:
            raise ValueError(f"alat must be positive; got {alat}")
        cell = cell / (alat * Bohr)
        units = LatticeUnits.ALAT

    rows = tuple(tuple(float(x) for x in row) for row in cell)
    return Cell(units=units, cell=rows)


def positions_from_atoms(
    atoms: Atoms,
    coordinate_type: PositionCoordinateType = PositionCoordinateType.CRYSTAL,
    labels: Sequence[str] | None = None,
) -> Positions:
    """
    Atomic positions in angstrom or crystal coordinates.

    ``labels`` overrides the chemical symbols (e.g. ``Fe1``/``Fe2`` for two
    magnetic sublattices). Constraints of type ``FixAtoms`` become
    ``if_pos = (False, False, False)`` on the fixed atoms.
    """
    if coordinate_type not in _SUPPORTED:
        raise ValueError(
            f"Cannot take '{coordinate_type.value}' positions from a structure; "
            f"use one of {[c.value for c in _SUPPORTED]}."
        )

    if coordinate_type is PositionCoordinateType.CRYSTAL:
        pos = atoms.get_scaled_positions(wrap=False)
    else:
        pos = atoms.get_positions()

    syms = list(labels) if labels is not None else atoms.get_chemical_symbols()
    if len(syms) != len(pos):
        raise ValueError("Mismatch between number of labels and positions.")

    fixed = _fixed_indices(atoms)
    coords: List[AtomCoordinate] = []
    for i, (s, (x, y, z)) in enumerate(zip(syms, pos)):
        if_pos = (False, False, False) if i in fixed else None
        coords.append(AtomCoordinate(species=s, r=(float(x), float(y), float(z)), if_pos=if_pos))

    return Positions(coordinate_type=coordinate_type, coordinates=tuple(coords))


def _fixed_indices(atoms: Atoms) -> set[int]:
    out: set[int] = set()
    for c in atoms.constraints:
        if isinstance(c, FixAtoms):
            out.update(int(i) for i in c.get_indices())
    return out


def default_mass(symbol: str) -> float:
    """Standard atomic mass (amu) for a chemical symbol, e.g. ``Fe`` -> 55.845."""
    try:
        return float(atomic_masses[atomic_numbers[symbol]])
    except KeyError as exc:
        raise ValueError(f"Unknown chemical symbol: {symbol!r}") from exc


def species_from_atoms(
    atoms: Atoms,
    pseudopotentials: Dict[str, str],
    masses: Dict[str, float] | None = None,
) -> tuple[Species, ...]:
    """
    One species per distinct symbol, in order of first appearance.

    Masses default to ASE's standard atomic masses.
    """
    masses = masses or {}
    seen: List[str] = []
    for s in atoms.get_chemical_symbols():
        if s not in seen:
            seen.append(s)

    out = []
    for s in seen:
        if s not in pseudopotentials:
            raise ValueError(f"No pseudopotential given for species {s!r}.")
        mass = masses[s] if s in masses else default_mass(s)
        out.append(Species(label=s, mass=float(mass), pseudopotential_filename=pseudopotentials[s]))
    return tuple(out)
