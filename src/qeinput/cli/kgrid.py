# src/qeinput/cli/kgrid.py
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from qeinput.pw.kpoints import uniform_grid
from qeinput.pw.serialize import weighted_k_points


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog or "qei kgrid",
        description=(
            "Print a uniform n1 x n2 x n3 grid as an explicit 'K_POINTS crystal' "
            "card (equal weights, third index fastest)."
        ),
    )
    p.add_argument("nk", nargs=3, type=int, metavar="N", help="Grid size along each axis.")
    return p


def main(argv: Sequence[str] | None = None, prog: str | None = None) -> int:
    parser = build_parser(prog=prog)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        points = uniform_grid(args.nk)
    except ValueError as exc:
        parser.error(str(exc))

    sys.stdout.write(weighted_k_points(points) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
