# src/qeinput/io/__init__.py
from .writer import write_text
__all__ = ["write_text"]
