# src/qeinput/cli/_common.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from qeinput.cli._completers import complete_files
from qeinput.io.writer import write_text

LOG = logging.getLogger("qei.cli")


def add_config_arg(p: argparse.ArgumentParser, default: str) -> None:
    complete_files(
        p.add_argument(
            "-c",
            "--config",
            default=default,
            help=f"Path to YAML config (default: {default}).",
        ),
        "yaml",
        "yml",
    )


def add_output_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file path, or '-' for stdout. Default: stdout.",
    )
    p.add_argument(
        "--overwrite",
        action="store_true",
        help="Allow overwriting an existing output file.",
    )


def add_debug_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Verbose logging.")


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def emit(text: str, output: str | None, overwrite: bool, parser: argparse.ArgumentParser) -> None:
    """Write to stdout (``None`` or ``-``) or to a file, refusing to clobber."""
    if output is None or output == "-":
        sys.stdout.write(text + "\n")
        return
    out_path = Path(output)
    if out_path.exists() and not overwrite:
        parser.error(f"Refusing to overwrite existing file: {out_path}")
    write_text(text, out_path)
    LOG.info("Wrote %s", out_path)


def report(errs, stream=None) -> None:
    stream = stream or sys.stderr
    for e in errs:
        stream.write(f"error: {e}\n")
