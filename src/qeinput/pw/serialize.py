# src/qeinput/pw/serialize.py
from __future__ import annotations

import logging
import os

from qeinput.error import OutDirEncodingError, PseudoDirEncodingError
from qeinput.fields import (
    field_line,
    fmt_float,
    fmt_sci,
    path_text,
    push_bool_field,
    quoted,
)
from qeinput.io.writer import write_text
from qeinput.pw.input import (
    Automatic,
    Bands,
    Cell,
    CollinearPolarized,
    Crystal,
    CrystalBands,
    CrystalUniform,
    Fixed,
    Free,
    Noncollinear,
    NonPolarized,
    Nscf,
    PwInput,
    Scf,
    Smearing,
    TeField,
    Tetrahedra,
    TetrahedraLin,
    TetrahedraOpt,
)
from qeinput.pw.kpoints import uniform_grid
from qeinput.pw.validate import validate

LOG = logging.getLogger("qei.pw")


def make_input_file(input: PwInput) -> str:
    """
    Render ``input`` as pw.x input text.

    The input is validated first; on any violation :class:`ErrorList` is
    raised and no text is produced. Sections are joined by newlines with no
    trailing newline.
    """
    validate(input)

    sections = [
        make_control(input),
        make_system(input),
        make_electrons(input),
        make_species(input),
        make_cell(input),
        make_positions(input),
        make_k_points(input),
    ]

    LOG.debug(
        "rendered pw input: calculation=%s nat=%d ntyp=%d",
        calculation_value(input.calculation),
        len(input.atomic_positions.coordinates),
        len(input.species),
    )
    return "\n".join(sections)


def write_input_file(input: PwInput, file_path: str | os.PathLike) -> None:
    text = make_input_file(input)
    write_text(text, file_path)
    LOG.debug("wrote pw input to %s", file_path)


# ---------- namelists ----------

def make_control(input: PwInput) -> str:
    lines = [" &control"]
    lines.append(field_line("calculation", quoted(calculation_value(input.calculation))))

    control = input.control

    if control.restart_mode is not None:
        lines.append(field_line("restart_mode", quoted(control.restart_mode.value)))

    if control.disk_io is not None:
        lines.append(field_line("disk_io", quoted(control.disk_io.value)))

    push_bool_field(lines, "wf_collect", control.wf_collect)

    if control.pseudo_dir is not None:
        path = path_text(control.pseudo_dir, PseudoDirEncodingError)
        lines.append(field_line("pseudo_dir", quoted(path)))

    if control.out_dir is not None:
        path = path_text(control.out_dir, OutDirEncodingError)
        lines.append(field_line("outdir", quoted(path)))

    efield = input.efield
    if efield is not None:
        if not isinstance(efield, TeField):
            raise TypeError(f"Unknown efield: {efield!r}")
        push_bool_field(lines, "tefield", True)
        push_bool_field(lines, "dipfield", efield.dipfield)

    if control.prefix is not None:
        lines.append(field_line("prefix", quoted(control.prefix)))

    lines.append(" /")
    return "\n".join(lines)


def make_system(input: PwInput) -> str:
    lines = [" &system"]
    system = input.system
    calc = input.calculation

    lines.append(field_line("ibrav", ibrav_value(system.ibrav)))
    lines.append(field_line("celldm(1)", fmt_float(system.alat)))

    lines.append(field_line("nat", str(len(input.atomic_positions.coordinates))))
    lines.append(field_line("ntyp", str(len(input.species))))

    if isinstance(calc, (Nscf, Bands)) and calc.nbnd is not None:
        lines.append(field_line("nbnd", str(calc.nbnd)))

    lines.append(field_line("ecutwfc", fmt_float(system.ecutwfc)))
    lines.append(field_line("ecutrho", fmt_float(system.ecutrho)))

    if isinstance(calc, (Nscf, Bands)):
        push_bool_field(lines, "nosym", calc.nosym)

    occ = system.occupations
    lines.append(field_line("occupations", quoted(occupations_value(occ))))
    if isinstance(occ, Smearing):
        lines.append(field_line("smearing", quoted(occ.kind.value)))
        lines.append(field_line("degauss", fmt_float(occ.degauss)))

    spin = system.spin_type
    if spin is None:
        pass
    elif isinstance(spin, NonPolarized):
        lines.append(field_line("nspin", "1"))
    elif isinstance(spin, CollinearPolarized):
        lines.append(field_line("nspin", "2"))
    elif isinstance(spin, Noncollinear):
        push_bool_field(lines, "noncolin", True)
        push_bool_field(lines, "lspinorb", spin.spin_orbit)
    else:
        raise TypeError(f"Unknown spin type: {spin!r}")

    efield = input.efield
    if isinstance(efield, TeField):
        lines.append(field_line("edir", efield.edir.value))
        lines.append(field_line("emaxpos", fmt_float(efield.emaxpos)))
        lines.append(field_line("eopreg", fmt_float(efield.eopreg)))
        lines.append(field_line("eamp", fmt_sci(efield.eamp)))

    lines.append(" /")
    return "\n".join(lines)


def make_electrons(input: PwInput) -> str:
    lines = [" &electrons"]
    calc = input.calculation

    if isinstance(calc, Scf):
        lines.append(field_line("conv_thr", fmt_sci(calc.conv_thr)))
    elif isinstance(calc, (Nscf, Bands)):
        lines.append(field_line("diago_thr_init", fmt_sci(calc.diago_thr_init)))
    else:
        raise TypeError(f"Unknown calculation: {calc!r}")

    electrons = input.electrons
    if electrons.startingwfc is not None:
        lines.append(field_line("startingwfc", quoted(electrons.startingwfc.value)))
    if electrons.diagonalization is not None:
        lines.append(field_line("diagonalization", quoted(electrons.diagonalization.value)))

    lines.append(" /")
    return "\n".join(lines)


# ---------- cards ----------

def make_species(input: PwInput) -> str:
    lines = ["ATOMIC_SPECIES"]
    for sp in input.species:
        lines.append(f"{sp.label} {fmt_float(sp.mass)} {sp.pseudopotential_filename}")
    return "\n".join(lines)


def make_cell(input: PwInput) -> str:
    """``CELL_PARAMETERS`` card of the explicit (``ibrav = 0``) lattice."""
    ibrav = input.system.ibrav
    if isinstance(ibrav, Free):
        return _cell_card(ibrav.cell)
    raise TypeError(f"Unknown ibrav: {ibrav!r}")


def _cell_card(cell: Cell) -> str:
    lines = [f"CELL_PARAMETERS {cell.units.value}"]
    for row in cell.cell:
        lines.append(_vec(row))
    return "\n".join(lines)


def make_positions(input: PwInput) -> str:
    positions = input.atomic_positions
    lines = [f"ATOMIC_POSITIONS {positions.coordinate_type.value}"]
    for atom in positions.coordinates:
        line = f"{atom.species} {_vec(atom.r)}"
        if atom.if_pos is not None:
            line += " " + _flags(atom.if_pos)
        lines.append(line)
    return "\n".join(lines)


def make_k_points(input: PwInput) -> str:
    k_points = input.k_points

    if isinstance(k_points, Crystal):
        return weighted_k_points(k_points.points)

    if isinstance(k_points, CrystalUniform):
        return weighted_k_points(uniform_grid(k_points.nk))

    if isinstance(k_points, Automatic):
        nk = " ".join(str(int(n)) for n in k_points.nk)
        sk = _flags(k_points.sk if k_points.sk is not None else (False, False, False))
        return "\n".join(["K_POINTS automatic", f"{nk} {sk}"])

    if isinstance(k_points, CrystalBands):
        lines = ["K_POINTS crystal_b", str(len(k_points.panel_bounds))]
        for k in k_points.panel_bounds:
            lines.append(f"{_vec(k)} {k_points.nk_per_panel}")
        return "\n".join(lines)

    raise TypeError(f"Unknown k-points: {k_points!r}")


def weighted_k_points(points) -> str:
    """``K_POINTS crystal`` card: count line, then ``kx ky kz weight`` rows."""
    lines = ["K_POINTS crystal", str(len(points))]
    for kx, ky, kz, w in points:
        lines.append(f"{_vec((kx, ky, kz))} {fmt_float(w)}")
    return "\n".join(lines)


def _vec(v) -> str:
    return " ".join(fmt_float(x) for x in v)


def _flags(bits) -> str:
    return " ".join("1" if b else "0" for b in bits)


# ---------- field values ----------

def calculation_value(calc) -> str:
    if isinstance(calc, Scf):
        return "scf"
    if isinstance(calc, Nscf):
        return "nscf"
    if isinstance(calc, Bands):
        return "bands"
    raise TypeError(f"Unknown calculation: {calc!r}")


def ibrav_value(ibrav) -> str:
    if isinstance(ibrav, Free):
        return "0"
    raise TypeError(f"Unknown ibrav: {ibrav!r}")


def occupations_value(occ) -> str:
    if isinstance(occ, Smearing):
        return "smearing"
    if isinstance(occ, Tetrahedra):
        return "tetrahedra"
    if isinstance(occ, TetrahedraLin):
        return "tetrahedra_lin"
    if isinstance(occ, TetrahedraOpt):
        return "tetrahedra_opt"
    if isinstance(occ, Fixed):
        return "fixed"
    raise TypeError(f"Unknown occupations: {occ!r}")
