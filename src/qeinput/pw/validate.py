# src/qeinput/pw/validate.py
from __future__ import annotations

import logging
from typing import List

from qeinput.error import ErrorList, QEInputError
from qeinput.fields import fmt_float
from qeinput.pw.input import Bands, Nscf, PwInput, Scf, Smearing

LOG = logging.getLogger("qei.pw")


class InputError(QEInputError, ValueError):
    """A single violated rule; ``value`` is the offending number."""

    template = "{value}"

    def __init__(self, value: float):
        self.value = value
        super().__init__(self.describe())

    def describe(self) -> str:
        return self.template.format(value=fmt_float(self.value))


class LatticeConstantError(InputError):
    template = "Lattice constant `alat` must be positive; got {value} instead."


class ConvThrError(InputError):
    template = "SCF convergence threshold `conv_thr` must be positive; got {value} instead."


class DiagoThrInitError(InputError):
    template = (
        "Diagonalization convergence threshold `diago_thr_init` must be positive; "
        "got {value} instead."
    )


class EcutwfcError(InputError):
    template = "Wavefunction cutoff energy `ecutwfc` must be positive; got {value} instead."


class EcutrhoError(InputError):
    template = "Charge density cutoff energy `ecutrho` must be positive; got {value} instead."


class SmearingError(InputError):
    template = "Smearing value must be positive; got {value} instead."


class MassError(InputError):
    def __init__(self, label: str, value: float):
        self.label = label
        super().__init__(value)

    def describe(self) -> str:
        return (
            f"Atomic mass must be positive; for atom {self.label} "
            f"got {fmt_float(self.value)} instead."
        )


class SpeciesError(QEInputError, ValueError):
    """Reserved for the species cross-check below; never raised at present."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Species {label} in coordinate list is not given in species list.")


def check(input: PwInput) -> List[InputError]:
    """
    Return every rule the input violates, in a fixed order.

    The checks cover what the dataclasses cannot express: positive lattice
    constant, threshold, cutoffs, smearing width and masses. An empty list
    means the input is valid.
    """
    errs: List[InputError] = []
    system = input.system

    if not system.alat > 0.0:
        errs.append(LatticeConstantError(system.alat))

    calc = input.calculation
    if isinstance(calc, Scf):
        if not calc.conv_thr > 0.0:
            errs.append(ConvThrError(calc.conv_thr))
    elif isinstance(calc, (Nscf, Bands)):
        if not calc.diago_thr_init > 0.0:
            errs.append(DiagoThrInitError(calc.diago_thr_init))
    else:
        raise TypeError(f"Unknown calculation: {calc!r}")

    if not system.ecutwfc > 0.0:
        errs.append(EcutwfcError(system.ecutwfc))
    if not system.ecutrho > 0.0:
        errs.append(EcutrhoError(system.ecutrho))

    # Not checked: ecutrho against ecutwfc by pseudopotential type (about 4x
    # for norm-conserving, 8-12x for ultrasoft/PAW). Needs the UPF header.

    occ = system.occupations
    if isinstance(occ, Smearing) and not occ.degauss > 0.0:
        errs.append(SmearingError(occ.degauss))

    for sp in input.species:
        if not sp.mass > 0.0:
            errs.append(MassError(sp.label, sp.mass))

    # Not checked:
    # - cell volume |(a1 x a2) . a3| is non-zero (and whether pw.x rejects a
    #   negative triple product);
    # - emaxpos and eopreg lie in [0, 1];
    # - tetrahedron occupations come with automatic k-points;
    # - every species in the coordinate list appears in the species list
    #   (SpeciesError).

    return errs


def validate(input: PwInput) -> None:
    """Raise :class:`ErrorList` holding every violation, or return None."""
    errs = check(input)
    if errs:
        LOG.debug("pw input has %d validation error(s)", len(errs))
        raise ErrorList(errs)
