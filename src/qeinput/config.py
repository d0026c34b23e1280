# src/qeinput/config.py
"""
Build input models from YAML config files.

A pw.x config mirrors the model::

    calculation: {type: scf, conv_thr: 1.0e-8}
    control: {disk_io: low, pseudo_dir: ./pseudo, prefix: fe}
    system:
      alat: 5.42
      ecutwfc: 60
      ecutrho: 240
      occupations: {type: smearing, smearing: marzari-vanderbilt, degauss: 0.02}
      spin_type: collinear_polarized
      cell: {units: alat, vectors: [[1, 0, 0], [0, 1, 0], [0, 0, 1]]}
    electrons: {diagonalization: david}
    species:
      - {label: Fe, mass: 55.845, pseudopotential: Fe.UPF}
    atomic_positions:
      coordinate_type: crystal
      coordinates:
        - {species: Fe, r: [0, 0, 0]}
    k_points: {type: automatic, nk: [8, 8, 8]}

Instead of ``system.cell`` and ``atomic_positions`` a ``structure`` block
may name any file ASE can read (``{file: fe.xyz, coordinate_type:
crystal}``). Its cell is rescaled to alat units with ``system.alat``
(in bohr). Species masses may then be left out; they default to the
standard atomic masses.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Type, TypeVar

import numpy as np
import yaml

from qeinput.bands.input import BandsInput
from qeinput.error import ConfigError
from qeinput.pw.input import (
    AtomCoordinate,
    Automatic,
    Bands,
    Cell,
    CollinearPolarized,
    Control,
    Crystal,
    CrystalBands,
    CrystalUniform,
    Diagonalization,
    DiskIO,
    Electrons,
    Fixed,
    Free,
    LatticeDirection,
    LatticeUnits,
    Noncollinear,
    NonPolarized,
    Nscf,
    PositionCoordinateType,
    Positions,
    PwInput,
    RestartMode,
    Scf,
    Smearing,
    SmearingKind,
    Species,
    StartingWfc,
    System,
    TeField,
    Tetrahedra,
    TetrahedraLin,
    TetrahedraOpt,
)
from qeinput.pw2wannier90.input import Pw2Wannier90Input

LOG = logging.getLogger("qei.config")

T = TypeVar("T", bound=Enum)


# ---------- scalar helpers ----------

def _section(cfg: Mapping[str, Any], key: str) -> Dict[str, Any]:
    val = cfg.get(key) or {}
    if not isinstance(val, Mapping):
        raise ConfigError(f"'{key}' must be a mapping; got {type(val).__name__}.")
    return dict(val)


def _req(cfg: Mapping[str, Any], key: str, where: str = "") -> Any:
    if key not in cfg or cfg[key] is None:
        raise ConfigError(f"Missing required key '{where}{key}'.")
    return cfg[key]


def _float(val: Any, key: str) -> float:
    # PyYAML reads '1e-8' (no dot) as a string
    if isinstance(val, bool):
        raise ConfigError(f"'{key}' must be a number; got {val!r}.")
    try:
        return float(val)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be a number; got {val!r}.") from exc


def _int(val: Any, key: str) -> int:
    if isinstance(val, bool) or not isinstance(val, (int, str)):
        raise ConfigError(f"'{key}' must be an integer; got {val!r}.")
    try:
        return int(val)
    except ValueError as exc:
        raise ConfigError(f"'{key}' must be an integer; got {val!r}.") from exc


def _bool(val: Any, key: str) -> bool:
    if isinstance(val, bool):
        return val
    if isinstance(val, int) and val in (0, 1):
        return bool(val)
    if isinstance(val, str):
        v = val.strip().lower()
        if v in ("1", "true", "t", "yes", "y", "on"):
            return True
        if v in ("0", "false", "f", "no", "n", "off"):
            return False
    raise ConfigError(f"'{key}' must be a boolean; got {val!r}.")


def _opt(cfg: Mapping[str, Any], key: str, conv, where: str = ""):
    val = cfg.get(key)
    if val is None:
        return None
    return conv(val, f"{where}{key}")


def _enum(cls: Type[T], val: Any, key: str) -> T:
    try:
        return cls(str(val))
    except ValueError as exc:
        choices = ", ".join(m.value for m in cls)
        raise ConfigError(f"'{key}' must be one of: {choices}; got {val!r}.") from exc


def _vec3(val: Any, key: str) -> tuple[float, float, float]:
    try:
        arr = np.asarray(val, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be 3 numbers; got {val!r}.") from exc
    if arr.shape != (3,):
        raise ConfigError(f"'{key}' must be 3 numbers; got shape {arr.shape}.")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def _int3(val: Any, key: str) -> tuple[int, int, int]:
    if not isinstance(val, (list, tuple)) or len(val) != 3:
        raise ConfigError(f"'{key}' must be 3 integers; got {val!r}.")
    a, b, c = (_int(v, key) for v in val)
    return (a, b, c)


def _bool3(val: Any, key: str) -> tuple[bool, bool, bool]:
    if not isinstance(val, (list, tuple)) or len(val) != 3:
        raise ConfigError(f"'{key}' must be 3 booleans; got {val!r}.")
    a, b, c = (_bool(v, key) for v in val)
    return (a, b, c)


def _matrix3(val: Any, key: str) -> tuple:
    try:
        arr = np.asarray(val, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be a 3x3 matrix; got {val!r}.") from exc
    if arr.shape != (3, 3):
        raise ConfigError(f"'{key}' must be a 3x3 matrix; got shape {arr.shape}.")
    return tuple(tuple(float(x) for x in row) for row in arr)


def _typed(val: Any, key: str) -> tuple[str, Dict[str, Any]]:
    """Accept ``token`` or ``{type: token, ...}``; return (token, params)."""
    if isinstance(val, Mapping):
        return str(_req(val, "type", f"{key}.")), dict(val)
    return str(val), {}


def read_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Config file not found: {p}")
    cfg = yaml.safe_load(p.read_text(encoding="utf-8"))
    if cfg is None:
        cfg = {}
    if not isinstance(cfg, Mapping):
        raise ConfigError(f"Top level of {p} must be a mapping.")
    LOG.debug("read config %s (keys: %s)", p, sorted(cfg))
    return dict(cfg)


# ---------- pw.x ----------

def calculation_from_dict(val: Any):
    kind, d = _typed(val, "calculation")
    if kind == "scf":
        return Scf(conv_thr=_float(_req(d, "conv_thr", "calculation."), "calculation.conv_thr"))
    if kind in ("nscf", "bands"):
        cls = Nscf if kind == "nscf" else Bands
        return cls(
            diago_thr_init=_float(
                _req(d, "diago_thr_init", "calculation."), "calculation.diago_thr_init"
            ),
            nbnd=_opt(d, "nbnd", _int, "calculation."),
            nosym=_opt(d, "nosym", _bool, "calculation."),
        )
    raise ConfigError(f"'calculation.type' must be one of: scf, nscf, bands; got {kind!r}.")


def control_from_dict(d: Mapping[str, Any]) -> Control:
    return Control(
        restart_mode=_opt(d, "restart_mode", lambda v, k: _enum(RestartMode, v, k), "control."),
        disk_io=_opt(d, "disk_io", lambda v, k: _enum(DiskIO, v, k), "control."),
        wf_collect=_opt(d, "wf_collect", _bool, "control."),
        pseudo_dir=_opt(d, "pseudo_dir", lambda v, k: str(v), "control."),
        out_dir=_opt(d, "out_dir", lambda v, k: str(v), "control."),
        prefix=_opt(d, "prefix", lambda v, k: str(v), "control."),
    )


_SIMPLE_OCCUPATIONS = {
    "tetrahedra": Tetrahedra,
    "tetrahedra_lin": TetrahedraLin,
    "tetrahedra_opt": TetrahedraOpt,
    "fixed": Fixed,
}


def occupations_from_dict(val: Any):
    kind, d = _typed(val, "system.occupations")
    if kind == "smearing":
        return Smearing(
            kind=_enum(SmearingKind, _req(d, "smearing", "system.occupations."),
                       "system.occupations.smearing"),
            degauss=_float(_req(d, "degauss", "system.occupations."),
                           "system.occupations.degauss"),
        )
    if kind in _SIMPLE_OCCUPATIONS:
        return _SIMPLE_OCCUPATIONS[kind]()
    choices = ", ".join(["smearing", *_SIMPLE_OCCUPATIONS])
    raise ConfigError(f"'system.occupations' must be one of: {choices}; got {kind!r}.")


def spin_type_from_dict(val: Any):
    kind, d = _typed(val, "system.spin_type")
    if kind == "non_polarized":
        return NonPolarized()
    if kind == "collinear_polarized":
        return CollinearPolarized()
    if kind == "noncollinear":
        return Noncollinear(
            spin_orbit=_bool(d.get("spin_orbit", False), "system.spin_type.spin_orbit")
        )
    raise ConfigError(
        "'system.spin_type' must be one of: non_polarized, collinear_polarized, "
        f"noncollinear; got {kind!r}."
    )


def cell_from_dict(d: Mapping[str, Any]) -> Cell:
    return Cell(
        units=_enum(LatticeUnits, _req(d, "units", "system.cell."), "system.cell.units"),
        cell=_matrix3(_req(d, "vectors", "system.cell."), "system.cell.vectors"),
    )


def system_from_dict(d: Mapping[str, Any], cell: Cell | None = None) -> System:
    if "cell" in d:
        cell = cell_from_dict(d["cell"])
    if cell is None:
        raise ConfigError("Missing required key 'system.cell' (or a 'structure' block).")

    spin = d.get("spin_type")
    return System(
        ibrav=Free(cell),
        alat=_float(_req(d, "alat", "system."), "system.alat"),
        ecutwfc=_float(_req(d, "ecutwfc", "system."), "system.ecutwfc"),
        ecutrho=_float(_req(d, "ecutrho", "system."), "system.ecutrho"),
        occupations=occupations_from_dict(_req(d, "occupations", "system.")),
        spin_type=spin_type_from_dict(spin) if spin is not None else None,
    )


def efield_from_dict(d: Mapping[str, Any]) -> TeField:
    kind = str(d.get("type", "tefield"))
    if kind != "tefield":
        raise ConfigError(f"'efield.type' must be tefield; got {kind!r}.")
    return TeField(
        dipfield=_bool(_req(d, "dipfield", "efield."), "efield.dipfield"),
        edir=_enum(LatticeDirection, _req(d, "edir", "efield."), "efield.edir"),
        emaxpos=_float(_req(d, "emaxpos", "efield."), "efield.emaxpos"),
        eopreg=_float(_req(d, "eopreg", "efield."), "efield.eopreg"),
        eamp=_float(_req(d, "eamp", "efield."), "efield.eamp"),
    )


def electrons_from_dict(d: Mapping[str, Any]) -> Electrons:
    return Electrons(
        startingwfc=_opt(d, "startingwfc", lambda v, k: _enum(StartingWfc, v, k), "electrons."),
        diagonalization=_opt(
            d, "diagonalization", lambda v, k: _enum(Diagonalization, v, k), "electrons."
        ),
    )


def species_from_list(items: Any) -> tuple[Species, ...]:
    if not isinstance(items, list):
        raise ConfigError("'species' must be a list.")
    out = []
    for i, item in enumerate(items):
        where = f"species[{i}]."
        if not isinstance(item, Mapping):
            raise ConfigError(f"'species[{i}]' must be a mapping.")
        label = str(_req(item, "label", where))
        if item.get("mass") is not None:
            mass = _float(item["mass"], f"{where}mass")
        else:
            mass = _default_mass(label, where)
        out.append(
            Species(
                label=label,
                mass=mass,
                pseudopotential_filename=str(_req(item, "pseudopotential", where)),
            )
        )
    return tuple(out)


def _default_mass(label: str, where: str) -> float:
    from qeinput.io.structure import default_mass

    try:
        return default_mass(label)
    except ValueError as exc:
        raise ConfigError(
            f"Missing '{where}mass' and {label!r} is not a chemical symbol."
        ) from exc


def positions_from_dict(d: Mapping[str, Any]) -> Positions:
    ctype = _enum(
        PositionCoordinateType,
        _req(d, "coordinate_type", "atomic_positions."),
        "atomic_positions.coordinate_type",
    )
    items = _req(d, "coordinates", "atomic_positions.")
    if not isinstance(items, list):
        raise ConfigError("'atomic_positions.coordinates' must be a list.")

    coords = []
    for i, item in enumerate(items):
        where = f"atomic_positions.coordinates[{i}]."
        if not isinstance(item, Mapping):
            raise ConfigError(f"'atomic_positions.coordinates[{i}]' must be a mapping.")
        coords.append(
            AtomCoordinate(
                species=str(_req(item, "species", where)),
                r=_vec3(_req(item, "r", where), f"{where}r"),
                if_pos=_opt(item, "if_pos", _bool3, where),
            )
        )
    return Positions(coordinate_type=ctype, coordinates=tuple(coords))


def k_points_from_dict(d: Mapping[str, Any]):
    kind = str(_req(d, "type", "k_points."))
    if kind == "automatic":
        return Automatic(
            nk=_int3(_req(d, "nk", "k_points."), "k_points.nk"),
            sk=_opt(d, "sk", _bool3, "k_points."),
        )
    if kind == "crystal":
        points = _req(d, "points", "k_points.")
        try:
            arr = np.asarray(points, dtype=float)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"'k_points.points' must be rows of numbers; got {points!r}.") from exc
        if arr.ndim != 2 or arr.shape[1] != 4:
            raise ConfigError(
                f"'k_points.points' must be rows of kx ky kz weight; got shape {arr.shape}."
            )
        return Crystal(points=tuple(tuple(float(x) for x in row) for row in arr))
    if kind == "crystal_uniform":
        nk = _int3(_req(d, "nk", "k_points."), "k_points.nk")
        if any(n <= 0 for n in nk):
            raise ConfigError(f"'k_points.nk' must be positive; got {nk}.")
        return CrystalUniform(nk=nk)
    if kind == "crystal_b":
        bounds = _req(d, "panel_bounds", "k_points.")
        if not isinstance(bounds, list):
            raise ConfigError("'k_points.panel_bounds' must be a list of 3-vectors.")
        return CrystalBands(
            nk_per_panel=_int(_req(d, "nk_per_panel", "k_points."), "k_points.nk_per_panel"),
            panel_bounds=tuple(
                _vec3(k, f"k_points.panel_bounds[{i}]") for i, k in enumerate(bounds)
            ),
        )
    raise ConfigError(
        "'k_points.type' must be one of: automatic, crystal, crystal_uniform, "
        f"crystal_b; got {kind!r}."
    )


def _structure_parts(cfg: Mapping[str, Any], base_dir: Path):
    """Cell, positions and (maybe) species from a ``structure`` block."""
    from qeinput.io.structure import (
        cell_from_atoms,
        positions_from_atoms,
        read_structure,
        species_from_atoms,
    )

    d = _section(cfg, "structure")
    file = Path(str(_req(d, "file", "structure.")))
    if not file.is_absolute():
        file = base_dir / file
    ctype = _enum(
        PositionCoordinateType,
        d.get("coordinate_type", "crystal"),
        "structure.coordinate_type",
    )

    # celldm(1) is always written, so the cell goes out in alat units
    system = _section(cfg, "system")
    alat = _float(_req(system, "alat", "system."), "system.alat")

    atoms = read_structure(file, format=d.get("format"), index=_int(d.get("index", 0), "structure.index"))
    LOG.debug("read %d atoms from %s", len(atoms), file)

    try:
        cell = cell_from_atoms(atoms, alat=alat)
        positions = positions_from_atoms(atoms, ctype)
        species = None
        if "species" not in cfg:
            pseudos = _section(cfg, "pseudopotentials")
            if not pseudos:
                raise ConfigError("Missing 'species' (or 'pseudopotentials' with 'structure').")
            species = species_from_atoms(atoms, {str(k): str(v) for k, v in pseudos.items()})
    except ValueError as exc:
        if isinstance(exc, ConfigError):
            raise
        raise ConfigError(f"structure: {exc}") from exc
    return cell, positions, species


def pw_from_dict(cfg: Mapping[str, Any], base_dir: str | Path = ".") -> PwInput:
    cell = positions = species = None
    if cfg.get("structure") is not None:
        cell, positions, species = _structure_parts(cfg, Path(base_dir))

    if "atomic_positions" in cfg:
        positions = positions_from_dict(_section(cfg, "atomic_positions"))
    if positions is None:
        raise ConfigError("Missing required key 'atomic_positions' (or a 'structure' block).")

    if "species" in cfg:
        species = species_from_list(cfg["species"])
    if species is None:
        raise ConfigError("Missing required key 'species'.")

    efield = _section(cfg, "efield") if cfg.get("efield") is not None else None

    return PwInput(
        calculation=calculation_from_dict(_req(cfg, "calculation")),
        control=control_from_dict(_section(cfg, "control")),
        system=system_from_dict(_section(cfg, "system"), cell=cell),
        electrons=electrons_from_dict(_section(cfg, "electrons")),
        species=species,
        atomic_positions=positions,
        k_points=k_points_from_dict(_section(cfg, "k_points")),
        efield=efield_from_dict(efield) if efield is not None else None,
    )


def load_pw_config(path: str | Path) -> PwInput:
    p = Path(path)
    return pw_from_dict(read_yaml(p), base_dir=p.parent)


# ---------- bands.x / pw2wannier90.x ----------

def bands_from_dict(cfg: Mapping[str, Any]) -> BandsInput:
    return BandsInput(
        lsym=_bool(_req(cfg, "lsym"), "lsym"),
        prefix=_opt(cfg, "prefix", lambda v, k: str(v)),
        out_dir=_opt(cfg, "out_dir", lambda v, k: str(v)),
        filband=_opt(cfg, "filband", lambda v, k: str(v)),
    )


def load_bands_config(path: str | Path) -> BandsInput:
    return bands_from_dict(read_yaml(path))


def pw2wannier90_from_dict(cfg: Mapping[str, Any]) -> Pw2Wannier90Input:
    return Pw2Wannier90Input(
        prefix=str(_req(cfg, "prefix")),
        seedname=str(_req(cfg, "seedname")),
        write_unk=_bool(_req(cfg, "write_unk"), "write_unk"),
        write_amn=_bool(_req(cfg, "write_amn"), "write_amn"),
        write_mmn=_bool(_req(cfg, "write_mmn"), "write_mmn"),
        write_spn=_bool(_req(cfg, "write_spn"), "write_spn"),
        out_dir=_opt(cfg, "out_dir", lambda v, k: str(v)),
    )


def load_pw2wannier90_config(path: str | Path) -> Pw2Wannier90Input:
    return pw2wannier90_from_dict(read_yaml(path))
