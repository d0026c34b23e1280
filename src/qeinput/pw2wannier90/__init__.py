# src/qeinput/pw2wannier90/__init__.py
from .input import Pw2Wannier90Input
from .serialize import make_input_file, write_input_file
__all__ = ["Pw2Wannier90Input", "make_input_file", "write_input_file"]
