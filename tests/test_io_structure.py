from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

ase = pytest.importorskip("ase")
from ase.build import bulk  # noqa: E402
from ase.constraints import FixAtoms  # noqa: E402
from ase.io import write  # noqa: E402
from ase.units import Bohr  # noqa: E402

from qeinput.config import load_pw_config  # noqa: E402
from qeinput.io.structure import (  # noqa: E402
    cell_from_atoms,
    default_mass,
    positions_from_atoms,
    read_structure,
    species_from_atoms,
)
from qeinput.pw import input as pwi  # noqa: E402
from qeinput.pw import make_input_file  # noqa: E402


@pytest.fixture
def fe_bcc():
    return bulk("Fe", "bcc", a=2.87, cubic=True)


def test_cell_in_angstrom(fe_bcc):
    cell = cell_from_atoms(fe_bcc)
    assert cell.units is pwi.LatticeUnits.ANGSTROM
    np.testing.assert_allclose(np.array(cell.cell), np.eye(3) * 2.87)
    assert all(isinstance(x, float) for row in cell.cell for x in row)


def test_positions_crystal_and_angstrom(fe_bcc):
    crys = positions_from_atoms(fe_bcc)
    assert crys.coordinate_type is pwi.PositionCoordinateType.CRYSTAL
    assert [a.species for a in crys.coordinates] == ["Fe", "Fe"]
    assert crys.coordinates[1].r == pytest.approx((0.5, 0.5, 0.5))

    cart = positions_from_atoms(fe_bcc, pwi.PositionCoordinateType.ANGSTROM_CARTESIAN)
    assert cart.coordinates[1].r == pytest.approx((1.435, 1.435, 1.435))
    assert all(a.if_pos is None for a in cart.coordinates)


def test_positions_labels_and_fixed_atoms(fe_bcc):
    fe_bcc.set_constraint(FixAtoms(indices=[0]))
    pos = positions_from_atoms(fe_bcc, labels=["Fe1", "Fe2"])
    assert [a.species for a in pos.coordinates] == ["Fe1", "Fe2"]
    assert pos.coordinates[0].if_pos == (False, False, False)
    assert pos.coordinates[1].if_pos is None

    with pytest.raises(ValueError):
        positions_from_atoms(fe_bcc, labels=["Fe1"])


def test_unsupported_coordinate_type(fe_bcc):
    with pytest.raises(ValueError, match="alat"):
        positions_from_atoms(fe_bcc, pwi.PositionCoordinateType.ALAT_CARTESIAN)


def test_species_from_atoms():
    atoms = bulk("NaCl", "rocksalt", a=5.64)
    species = species_from_atoms(atoms, {"Na": "Na.UPF", "Cl": "Cl.UPF"}, masses={"Cl": 35.0})
    assert [s.label for s in species] == ["Na", "Cl"]
    assert species[0].mass == pytest.approx(default_mass("Na"))
    assert species[1].mass == 35.0

    with pytest.raises(ValueError, match="Cl"):
        species_from_atoms(atoms, {"Na": "Na.UPF"})


def test_default_mass():
    assert default_mass("Fe") == pytest.approx(55.845, abs=1e-3)
    with pytest.raises(ValueError):
        default_mass("Xx")


def test_read_structure(tmp_path: Path, fe_bcc):
    p = tmp_path / "fe.extxyz"
    write(p, fe_bcc, format="extxyz")
    atoms = read_structure(p)
    assert len(atoms) == 2
    assert atoms.get_chemical_symbols() == ["Fe", "Fe"]

    with pytest.raises(FileNotFoundError):
        read_structure(tmp_path / "missing.xyz")


def test_cell_in_alat_units(fe_bcc):
    alat = 2.87 / Bohr
    cell = cell_from_atoms(fe_bcc, alat=alat)
    assert cell.units is pwi.LatticeUnits.ALAT
    np.testing.assert_allclose(np.array(cell.cell), np.eye(3), atol=1e-12)

    half = cell_from_atoms(fe_bcc, alat=2 * alat)
    np.testing.assert_allclose(np.array(half.cell), np.eye(3) * 0.5, atol=1e-12)

    with pytest.raises(ValueError):
        cell_from_atoms(fe_bcc, alat=0.0)


def _write_structure_case(tmp_path: Path, fe_bcc, alat: float, ctype: str = "crystal") -> Path:
    write(tmp_path / "fe.extxyz", fe_bcc, format="extxyz")
    cfg = tmp_path / "case.yaml"
    cfg.write_text(
        "calculation: {type: scf, conv_thr: 1.0e-8}\n"
        f"system: {{alat: {alat!r}, ecutwfc: 60, ecutrho: 480, occupations: fixed}}\n"
        f"structure: {{file: fe.extxyz, coordinate_type: {ctype}}}\n"
        "pseudopotentials: {Fe: Fe.pbe-spn-kjpaw.UPF}\n"
        "k_points: {type: automatic, nk: [6, 6, 6]}\n",
        encoding="utf-8",
    )
    return cfg


def test_pw_config_with_structure_block(tmp_path: Path, fe_bcc):
    inp = load_pw_config(_write_structure_case(tmp_path, fe_bcc, alat=5.42))

    cell = inp.system.ibrav.cell
    assert cell.units is pwi.LatticeUnits.ALAT
    np.testing.assert_allclose(np.array(cell.cell), np.eye(3) * 2.87 / (5.42 * Bohr))
    assert len(inp.atomic_positions.coordinates) == 2
    (fe,) = inp.species
    assert fe.pseudopotential_filename == "Fe.pbe-spn-kjpaw.UPF"
    assert fe.mass == pytest.approx(55.845, abs=1e-3)


@pytest.mark.parametrize("ctype", ["crystal", "angstrom"])
def test_structure_render_never_mixes_celldm_with_absolute_cell(tmp_path: Path, fe_bcc, ctype):
    alat = 2.87 / Bohr
    inp = load_pw_config(_write_structure_case(tmp_path, fe_bcc, alat=alat, ctype=ctype))
    lines = make_input_file(inp).split("\n")

    assert any(l.startswith("    celldm(1)=") for l in lines)
    assert "CELL_PARAMETERS angstrom" not in lines
    assert "CELL_PARAMETERS bohr" not in lines
    i = lines.index("CELL_PARAMETERS alat")
    rows = [[float(x) for x in l.split()] for l in lines[i + 1 : i + 4]]
    np.testing.assert_allclose(rows, np.eye(3), atol=1e-12)
    assert f"ATOMIC_POSITIONS {ctype}" in lines
