# src/qeinput/cli/check_pw.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from qeinput.cli._common import add_config_arg, add_debug_arg, report, setup_logging
from qeinput.config import load_pw_config
from qeinput.error import ConfigError
from qeinput.pw.validate import check

LOG = logging.getLogger("qei.cli")


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog or "qei check pw",
        description=(
            "Check a pw.x YAML config without writing anything. Prints every "
            "violated rule (exit 1) or 'OK' (exit 0)."
        ),
    )
    add_config_arg(p, "pw.yaml")
    add_debug_arg(p)
    return p


def main(argv: Sequence[str] | None = None, prog: str | None = None) -> int:
    parser = build_parser(prog=prog)
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging(args.debug)

    try:
        pw = load_pw_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        parser.error(str(exc))

    errs = check(pw)
    if errs:
        report(errs)
        LOG.debug("%s: %d error(s)", args.config, len(errs))
        return 1

    sys.stdout.write("OK\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
