# src/qeinput/pw/__init__.py
"""
pw.x input: model (``input``), runtime checks (``validate``), text
(``serialize``) and the uniform k-point generator (``kpoints``).
"""

from .input import PwInput
from .validate import check, validate
from .serialize import make_input_file, write_input_file
from .kpoints import uniform_grid

__all__ = ["PwInput", "check", "validate", "make_input_file", "write_input_file", "uniform_grid"]
