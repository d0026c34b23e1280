# src/qeinput/cli/main.py
from __future__ import annotations
import argparse, sys
from importlib import import_module
from typing import Dict, List, Tuple, Union

try:
    from argcomplete import autocomplete  # optional; CLI still works without it
except ImportError:
    autocomplete = None

# group -> [{ subcmd: (module_path, help_text, prog_string) }, group_help]
# A group given as a plain tuple is a leaf command without subcommands.
COMMANDS: Dict[str, Union[List, Tuple[str, str, str]]] = {
    "gen": [
        {
            "pw": ("qeinput.cli.gen_pw", "YAML → pw.x input", "qei gen pw"),
            "bands": ("qeinput.cli.gen_bands", "YAML → bands.x input", "qei gen bands"),
            "pw2wannier90": ("qeinput.cli.gen_pw2wannier90", "YAML → pw2wannier90.x input", "qei gen pw2wannier90"),
        },
        'generate input files',
    ],
    "check": [
        {
            "pw": ("qeinput.cli.check_pw", "Report every validation error of a pw.x config", "qei check pw"),
        },
        'validate configs without writing',
    ],
    "kgrid": ("qeinput.cli.kgrid", "Expand a uniform k-point grid", "qei kgrid"),
}

def _run_leaf(mod_path: str, prog: str, extra: list[str]) -> int:
    """Import the leaf CLI and run it. With no args, show its help."""
    inner = import_module(mod_path).main
    argv = extra or ["--help"]
    return inner(argv=argv, prog=prog)

def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(prog="qei", description="Quantum ESPRESSO input generator")
    subparsers = parser.add_subparsers(dest="group", required=True)

    # just register group+subcommand names so argcomplete can tab-complete them
    for group, entry in COMMANDS.items():
        if isinstance(entry, tuple):
            mod_path, help_text, prog = entry
            sp = subparsers.add_parser(group, help=help_text, add_help=False)
            sp.set_defaults(_mod_path=mod_path, _prog=prog)
            continue
        table, group_help = entry
        p_group = subparsers.add_parser(group, help=f"{group_help}")
        sub = p_group.add_subparsers(dest="cmd", required=True)
        for cmd, (mod_path, help_text, prog) in table.items():
            sp = sub.add_parser(cmd, help=help_text, add_help=False)  # no arg defs here
            sp.set_defaults(_mod_path=mod_path, _prog=prog)

    if autocomplete:
        autocomplete(parser)

    args, extra = parser.parse_known_args(argv)
    return _run_leaf(args._mod_path, args._prog, extra)

if __name__ == "__main__":
    raise SystemExit(main())
