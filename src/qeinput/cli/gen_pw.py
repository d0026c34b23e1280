# src/qeinput/cli/gen_pw.py
from __future__ import annotations

import argparse
import dataclasses
from typing import Sequence

from qeinput.cli._common import (
    add_config_arg,
    add_debug_arg,
    add_output_args,
    emit,
    report,
    setup_logging,
)
from qeinput.cli._parser import _parse_triplet_bools, _parse_triplet_ints
from qeinput.config import load_pw_config
from qeinput.error import ConfigError, ErrorList, PathEncodingError
from qeinput.pw.input import Automatic, PwInput
from qeinput.pw.serialize import make_input_file


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog or "qei gen pw",
        description=(
            "Generate a pw.x input file from a YAML config. The config is "
            "validated first; every violated rule is reported and nothing is "
            "written if any is found."
        ),
    )
    add_config_arg(p, "pw.yaml")
    add_output_args(p)
    p.add_argument("--prefix", help="Override control.prefix.")
    p.add_argument("--outdir", help="Override control.out_dir.")
    p.add_argument(
        "--kpts",
        type=_parse_triplet_ints,
        default=None,
        help="Replace k_points with an automatic grid, e.g. '8,8,8'.",
    )
    p.add_argument(
        "--kshift",
        type=_parse_triplet_bools,
        default=None,
        help="Half-step shifts for --kpts, e.g. '1,1,1'. Default: no shift.",
    )
    add_debug_arg(p)
    return p


def apply_overrides(pw: PwInput, args: argparse.Namespace) -> PwInput:
    control = pw.control
    if args.prefix is not None:
        control = dataclasses.replace(control, prefix=args.prefix)
    if args.outdir is not None:
        control = dataclasses.replace(control, out_dir=args.outdir)

    k_points = pw.k_points
    if args.kpts is not None:
        k_points = Automatic(nk=args.kpts, sk=args.kshift)

    return dataclasses.replace(pw, control=control, k_points=k_points)


def main(argv: Sequence[str] | None = None, prog: str | None = None) -> int:
    parser = build_parser(prog=prog)
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging(args.debug)

    if args.kshift is not None and args.kpts is None:
        parser.error("--kshift requires --kpts.")

    try:
        pw = load_pw_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        parser.error(str(exc))

    pw = apply_overrides(pw, args)

    try:
        text = make_input_file(pw)
    except ErrorList as errs:
        report(errs)
        return 1
    except PathEncodingError as exc:
        report([exc])
        return 1

    emit(text, args.output, args.overwrite, parser)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
