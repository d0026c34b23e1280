# src/qeinput/cli/gen_pw2wannier90.py
from __future__ import annotations

import argparse
from typing import Sequence

from qeinput.pw2wannier90.serialize import make_input_file
from qeinput.cli._common import (
    add_config_arg,
    add_debug_arg,
    add_output_args,
    emit,
    report,
    setup_logging,
)
from qeinput.config import load_pw2wannier90_config
from qeinput.error import ConfigError, PathEncodingError


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog or "qei gen pw2wannier90",
        description="Generate a pw2wannier90.x input file (&inputpp namelist) from a YAML config.",
    )
    add_config_arg(p, "pw2wannier90.yaml")
    add_output_args(p)
    add_debug_arg(p)
    return p


def main(argv: Sequence[str] | None = None, prog: str | None = None) -> int:
    parser = build_parser(prog=prog)
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging(args.debug)

    try:
        p2w = load_pw2wannier90_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        parser.error(str(exc))

    try:
        text = make_input_file(p2w)
    except PathEncodingError as exc:
        report([exc])
        return 1

    emit(text, args.output, args.overwrite, parser)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
