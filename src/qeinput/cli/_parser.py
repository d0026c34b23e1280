# src/qeinput/cli/_parser.py
from __future__ import annotations

import argparse
from typing import Tuple


def _parse_triplet_bools(s: str) -> Tuple[bool, bool, bool]:
    parts = [p.strip() for p in s.split(",") if p.strip() != ""]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("Expected 3 comma-separated values like '1,1,1'")
    out = []
    for p in parts:
        pl = p.lower()
        if pl in ("t", "true", "1", "y", "yes"):
            out.append(True)
        elif pl in ("f", "false", "0", "n", "no"):
            out.append(False)
        else:
            raise argparse.ArgumentTypeError(f"Invalid boolean: {p!r}")
    return (out[0], out[1], out[2])


def _parse_triplet_ints(s: str) -> Tuple[int, int, int]:
    parts = [p.strip() for p in s.replace(",", " ").split() if p.strip()]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("Expected 3 integers like '4,4,4'")
    try:
        vals = [int(p) for p in parts]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    if any(v <= 0 for v in vals):
        raise argparse.ArgumentTypeError(f"Grid sizes must be positive; got {s!r}")
    return (vals[0], vals[1], vals[2])
