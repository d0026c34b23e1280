# src/qeinput/pw2wannier90/serialize.py
from __future__ import annotations

import logging
import os

from qeinput.error import OutDirEncodingError
from qeinput.fields import field_line, path_text, push_bool_field, quoted
from qeinput.io.writer import write_text
from qeinput.pw2wannier90.input import Pw2Wannier90Input

LOG = logging.getLogger("qei.pw2wannier90")


def make_input_file(input: Pw2Wannier90Input) -> str:
    lines = [" &inputpp"]

    lines.append(field_line("prefix", quoted(input.prefix)))

    if input.out_dir is not None:
        path = path_text(input.out_dir, OutDirEncodingError)
        lines.append(field_line("outdir", quoted(path)))

    lines.append(field_line("seedname", quoted(input.seedname)))

    push_bool_field(lines, "write_unk", input.write_unk)
    push_bool_field(lines, "write_amn", input.write_amn)
    push_bool_field(lines, "write_mmn", input.write_mmn)
    push_bool_field(lines, "write_spn", input.write_spn)

    lines.append(" /")
    return "\n".join(lines)


def write_input_file(input: Pw2Wannier90Input, file_path: str | os.PathLike) -> None:
    text = make_input_file(input)
    write_text(text, file_path)
    LOG.debug("wrote pw2wannier90 input to %s", file_path)
