# src/qeinput/error.py
from __future__ import annotations

from typing import Generic, Sequence, TypeVar


class QEInputError(Exception):
    """Base class for every error raised while building an input file."""


E = TypeVar("E", bound=Exception)


class ErrorList(QEInputError, Generic[E]):
    """
    Non-empty, ordered collection of errors found in a single pass.

    The text form is the newline-joined text of each error, in the order
    they were found.
    """

    def __init__(self, errs: Sequence[E]):
        self.errs: list[E] = list(errs)
        super().__init__(str(self))

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.errs)

    def __len__(self) -> int:
        return len(self.errs)

    def __iter__(self):
        return iter(self.errs)


class PathEncodingError(QEInputError):
    """A path field cannot be written as UTF-8 text."""

    field: str = "path"

    def __init__(self, path=None):
        self.path = path
        super().__init__(f"`{self.field}` is not valid UTF-8")


class PseudoDirEncodingError(PathEncodingError):
    field = "pseudo_dir"


class OutDirEncodingError(PathEncodingError):
    field = "out_dir"


class FilbandEncodingError(PathEncodingError):
    field = "filband"


class ConfigError(QEInputError, ValueError):
    """Configuration file is missing a key or holds a value of the wrong form."""
