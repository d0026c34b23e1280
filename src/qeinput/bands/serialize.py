# src/qeinput/bands/serialize.py
from __future__ import annotations

import logging
import os

from qeinput.bands.input import BandsInput
from qeinput.error import FilbandEncodingError, OutDirEncodingError
from qeinput.fields import field_line, path_text, push_bool_field, quoted
from qeinput.io.writer import write_text

LOG = logging.getLogger("qei.bands")


def make_input_file(input: BandsInput) -> str:
    lines = [" &bands"]

    if input.prefix is not None:
        lines.append(field_line("prefix", quoted(input.prefix)))

    if input.out_dir is not None:
        path = path_text(input.out_dir, OutDirEncodingError)
        lines.append(field_line("outdir", quoted(path)))

    if input.filband is not None:
        path = path_text(input.filband, FilbandEncodingError)
        lines.append(field_line("filband", quoted(path)))

    push_bool_field(lines, "lsym", input.lsym)

    lines.append(" /")
    return "\n".join(lines)


def write_input_file(input: BandsInput, file_path: str | os.PathLike) -> None:
    text = make_input_file(input)
    write_text(text, file_path)
    LOG.debug("wrote bands input to %s", file_path)
