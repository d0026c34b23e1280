# src/qeinput/pw/input.py
"""
Representation of the pw.x input file (Quantum ESPRESSO 6.x).

The model follows the principle that only valid states are representable:
fields that must be given together (e.g. ``eamp``, ``edir``, ... when
``tefield = .true.``) live on a single variant, so giving only some of them
is not possible. What the shapes cannot express (positive floats and the
like) is checked at runtime by :mod:`qeinput.pw.validate`.

Fields with a default in pw.x are ``None`` by default here, meaning "let
pw.x decide". Some are deliberately required even though pw.x has a
default; ``ecutrho`` is one, since the default is wrong for ultrasoft
pseudopotentials and PAW datasets.

``nat`` and ``ntyp`` are not stored: they are the lengths of
``atomic_positions.coordinates`` and ``species``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from os import PathLike
from typing import Tuple, Union

Vec3 = Tuple[float, float, float]
Matrix3 = Tuple[Vec3, Vec3, Vec3]
PathType = Union[str, bytes, PathLike]


class _Token(str, Enum):
    """Enum whose value is the token pw.x reads on the right of ``name=``."""

    def __str__(self) -> str:
        return self.value


# ---------- calculation ----------

@dataclass(frozen=True, slots=True)
class Scf:
    conv_thr: float


@dataclass(frozen=True, slots=True)
class Nscf:
    diago_thr_init: float
    nbnd: int | None = None
    nosym: bool | None = None


@dataclass(frozen=True, slots=True)
class Bands:
    # TODO: decide whether nosym should default to .true. for band paths
    diago_thr_init: float
    nbnd: int | None = None
    nosym: bool | None = None


Calculation = Union[Scf, Nscf, Bands]


# ---------- &control ----------

class RestartMode(_Token):
    FROM_SCRATCH = "from_scratch"
    RESTART = "restart"


class DiskIO(_Token):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class Control:
    restart_mode: RestartMode | None = None
    disk_io: DiskIO | None = None
    wf_collect: bool | None = None
    pseudo_dir: PathType | None = None
    out_dir: PathType | None = None
    prefix: str | None = None


# ---------- &system ----------

class LatticeUnits(_Token):
    BOHR = "bohr"
    ANGSTROM = "angstrom"
    ALAT = "alat"


@dataclass(frozen=True, slots=True)
class Cell:
    units: LatticeUnits
    cell: Matrix3


@dataclass(frozen=True, slots=True)
class Free:
    """``ibrav = 0``: lattice vectors given explicitly in ``CELL_PARAMETERS``."""
    cell: Cell


# Bravais lattice presets, in the order of the pw.x input description. Each
# would carry the celldm values it needs, skipping celldm(1) (that is
# ``System.alat``) and any celldm it does not use:
#   SimpleCubic, Fcc, Bcc, BccSymmetric, Hexagonal(c/a),
#   TrigonalRAxisC(cos), TrigonalRAxis111(cos), TetragonalP(c/a),
#   TetragonalI(c/a), OrthorhombicP(b/a, c/a), OrthorhombicBco(b/a, c/a),
#   OrthorhombicBcoAlternate(b/a, c/a), OrthorhombicFaceCentered(b/a, c/a),
#   OrthorhombicBodyCentered(b/a, c/a), MonoclinicPUniqueAxisC(b/a, c/a, cos),
#   MonoclinicPUniqueAxisB(b/a, c/a, cos), MonoclinicBaseCentered(b/a, c/a, cos),
#   Triclinic(b/a, c/a, cos_bc, cos_ac, cos_ab)
# The crystallographic constants A, B, C, cosAB, ... are not supported; they
# can be rewritten in terms of celldm.
Ibrav = Free


class SmearingKind(_Token):
    GAUSSIAN = "gaussian"
    METHFESSEL_PAXTON = "methfessel-paxton"
    MARZARI_VANDERBILT = "marzari-vanderbilt"
    FERMI_DIRAC = "fermi-dirac"


@dataclass(frozen=True, slots=True)
class Smearing:
    """Smeared occupations always come with the width ``degauss``."""
    kind: SmearingKind
    degauss: float


@dataclass(frozen=True, slots=True)
class Tetrahedra:
    pass


@dataclass(frozen=True, slots=True)
class TetrahedraLin:
    pass


@dataclass(frozen=True, slots=True)
class TetrahedraOpt:
    pass


@dataclass(frozen=True, slots=True)
class Fixed:
    pass


# FromInput (occupations='from_input') is not supported.
Occupations = Union[Smearing, Tetrahedra, TetrahedraLin, TetrahedraOpt, Fixed]


@dataclass(frozen=True, slots=True)
class NonPolarized:
    """``nspin = 1``."""


@dataclass(frozen=True, slots=True)
class CollinearPolarized:
    """``nspin = 2``."""


@dataclass(frozen=True, slots=True)
class Noncollinear:
    """``noncolin = .true.``, with ``lspinorb = spin_orbit``."""
    spin_orbit: bool


SpinType = Union[NonPolarized, CollinearPolarized, Noncollinear]


@dataclass(frozen=True, slots=True)
class System:
    ibrav: Ibrav
    alat: float
    ecutwfc: float
    ecutrho: float
    occupations: Occupations
    spin_type: SpinType | None = None


# ---------- electric field (&control + &system) ----------

class LatticeDirection(_Token):
    D1 = "1"
    D2 = "2"
    D3 = "3"


@dataclass(frozen=True, slots=True)
class TeField:
    """Sawtooth potential: ``tefield = .true.`` plus its five parameters."""
    dipfield: bool
    edir: LatticeDirection
    emaxpos: float
    eopreg: float
    eamp: float


# LelField (lelfield = .true.) is not supported.
Efield = TeField


# ---------- &electrons ----------

class StartingWfc(_Token):
    ATOMIC = "atomic"
    ATOMIC_PLUS_RANDOM = "atomic+random"
    RANDOM = "random"
    FILE = "file"


class Diagonalization(_Token):
    DAVID = "david"
    CG = "cg"


@dataclass(frozen=True, slots=True)
class Electrons:
    startingwfc: StartingWfc | None = None
    diagonalization: Diagonalization | None = None


# ---------- cards ----------

@dataclass(frozen=True, slots=True)
class Species:
    label: str
    mass: float
    pseudopotential_filename: str


class PositionCoordinateType(_Token):
    ALAT_CARTESIAN = "alat"
    BOHR_CARTESIAN = "bohr"
    ANGSTROM_CARTESIAN = "angstrom"
    CRYSTAL = "crystal"
    CRYSTAL_SG = "crystal_sg"


@dataclass(frozen=True, slots=True)
class AtomCoordinate:
    species: str
    r: Vec3
    if_pos: Tuple[bool, bool, bool] | None = None


@dataclass(frozen=True, slots=True)
class Positions:
    coordinate_type: PositionCoordinateType
    coordinates: Tuple[AtomCoordinate, ...]


@dataclass(frozen=True, slots=True)
class Crystal:
    """Explicit list of ``(kx, ky, kz, weight)`` in crystal coordinates."""
    points: Tuple[Tuple[float, float, float, float], ...]


@dataclass(frozen=True, slots=True)
class CrystalUniform:
    """Uniform grid, expanded to an explicit crystal list when rendered."""
    nk: Tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class Automatic:
    """Monkhorst-Pack grid; ``sk`` gives the half-step shift per axis."""
    nk: Tuple[int, int, int]
    sk: Tuple[bool, bool, bool] | None = None


@dataclass(frozen=True, slots=True)
class CrystalBands:
    """Band path: ``nk_per_panel`` points between consecutive bounds."""
    nk_per_panel: int
    panel_bounds: Tuple[Vec3, ...]


# Not supported: tpiba and tpiba_b lists, gamma, tpiba_c / crystal_c contours.
KPoints = Union[Crystal, CrystalUniform, Automatic, CrystalBands]


@dataclass(frozen=True, slots=True)
class PwInput:
    """
    A complete pw.x input.

    For nscf and bands calculations pw.x ignores the atomic positions and
    reuses those of the scf run; they are still required here because
    ``nat`` is derived from them.
    """
    calculation: Calculation
    control: Control
    system: System
    electrons: Electrons
    species: Tuple[Species, ...]
    atomic_positions: Positions
    k_points: KPoints
    efield: Efield | None = None
