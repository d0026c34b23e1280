from __future__ import annotations

import dataclasses

import pytest

from qeinput.error import ErrorList, QEInputError
from qeinput.pw import input as pwi
from qeinput.pw.validate import (
    ConvThrError,
    DiagoThrInitError,
    EcutrhoError,
    EcutwfcError,
    LatticeConstantError,
    MassError,
    SmearingError,
    check,
    validate,
)

from _utils import make_fe_scf


def _with_system(inp: pwi.PwInput, **changes) -> pwi.PwInput:
    return dataclasses.replace(inp, system=dataclasses.replace(inp.system, **changes))


def test_valid_input_passes():
    inp = make_fe_scf()
    assert check(inp) == []
    assert validate(inp) is None


@pytest.mark.parametrize(
    "calculation",
    [
        pwi.Scf(conv_thr=1e-10),
        pwi.Nscf(diago_thr_init=1e-6),
        pwi.Bands(diago_thr_init=1e-4, nbnd=16, nosym=True),
    ],
)
@pytest.mark.parametrize("alat, ecutwfc, ecutrho", [(3.0, 60.0, 240.0), (1e-3, 1e-3, 1e-3)])
def test_positive_values_pass(calculation, alat, ecutwfc, ecutrho):
    inp = _with_system(make_fe_scf(calculation=calculation), alat=alat, ecutwfc=ecutwfc, ecutrho=ecutrho)
    assert check(inp) == []


@pytest.mark.parametrize("alat", [0.0, -1e-12, -3.0])
def test_non_positive_alat(alat):
    inp = _with_system(make_fe_scf(), alat=alat)
    errs = check(inp)
    assert len(errs) == 1
    assert isinstance(errs[0], LatticeConstantError)
    assert errs[0].value == alat

    with pytest.raises(ErrorList) as exc:
        validate(inp)
    assert len(exc.value.errs) == 1


def test_errors_accumulate_in_check_order():
    inp = _with_system(make_fe_scf(), alat=-1.0, ecutwfc=0.0)
    with pytest.raises(ErrorList) as exc:
        validate(inp)
    errs = exc.value.errs
    assert [type(e) for e in errs] == [LatticeConstantError, EcutwfcError]
    assert str(exc.value) == (
        "Lattice constant `alat` must be positive; got -1 instead.\n"
        "Wavefunction cutoff energy `ecutwfc` must be positive; got 0 instead."
    )


def test_every_rule_reported_once():
    species = (
        pwi.Species(label="Fe", mass=0.0, pseudopotential_filename="Fe.UPF"),
        pwi.Species(label="Co", mass=58.933, pseudopotential_filename="Co.UPF"),
        pwi.Species(label="Ni", mass=-1.0, pseudopotential_filename="Ni.UPF"),
    )
    inp = make_fe_scf(calculation=pwi.Scf(conv_thr=-1e-8), species=species)
    inp = _with_system(
        inp,
        alat=0.0,
        ecutwfc=-60.0,
        ecutrho=0.0,
        occupations=pwi.Smearing(pwi.SmearingKind.GAUSSIAN, 0.0),
    )

    errs = check(inp)
    assert [type(e) for e in errs] == [
        LatticeConstantError,
        ConvThrError,
        EcutwfcError,
        EcutrhoError,
        SmearingError,
        MassError,
        MassError,
    ]
    assert [e.label for e in errs if isinstance(e, MassError)] == ["Fe", "Ni"]
    assert str(errs[-1]) == "Atomic mass must be positive; for atom Ni got -1 instead."


@pytest.mark.parametrize("cls", [pwi.Nscf, pwi.Bands])
def test_diago_thr_init_checked_for_nscf_and_bands(cls):
    inp = make_fe_scf(calculation=cls(diago_thr_init=0.0))
    errs = check(inp)
    assert len(errs) == 1
    assert isinstance(errs[0], DiagoThrInitError)
    assert errs[0].value == 0.0


def test_smearing_checked_only_when_selected():
    ok = _with_system(make_fe_scf(), occupations=pwi.Smearing(pwi.SmearingKind.FERMI_DIRAC, 0.01))
    assert check(ok) == []

    bad = _with_system(make_fe_scf(), occupations=pwi.Smearing(pwi.SmearingKind.FERMI_DIRAC, -0.01))
    (err,) = check(bad)
    assert isinstance(err, SmearingError)
    assert str(err) == "Smearing value must be positive; got -0.01 instead."


def test_nan_is_not_positive():
    inp = _with_system(make_fe_scf(), ecutrho=float("nan"))
    (err,) = check(inp)
    assert isinstance(err, EcutrhoError)


def test_errors_are_value_errors_and_share_base():
    inp = _with_system(make_fe_scf(), ecutrho=-1.0)
    with pytest.raises(QEInputError):
        validate(inp)
    (err,) = check(inp)
    assert isinstance(err, ValueError)


def test_species_names_are_not_cross_checked():
    # positions may name a species missing from the species list
    positions = pwi.Positions(
        coordinate_type=pwi.PositionCoordinateType.CRYSTAL,
        coordinates=(pwi.AtomCoordinate(species="Xx", r=(0.0, 0.0, 0.0)),),
    )
    assert check(make_fe_scf(atomic_positions=positions)) == []


def test_tetrahedra_with_explicit_k_points_is_not_rejected():
    inp = make_fe_scf(k_points=pwi.CrystalUniform(nk=(2, 2, 2)))
    assert isinstance(inp.system.occupations, pwi.Tetrahedra)
    assert check(inp) == []
