# src/qeinput/bands/__init__.py
from .input import BandsInput
from .serialize import make_input_file, write_input_file
__all__ = ["BandsInput", "make_input_file", "write_input_file"]
