"""Errors raised while reading CIF data into a Structure."""

from __future__ import annotations


class CIFError(Exception):
    """Base class of errors caused by bad CIF input."""


class CIFSyntaxError(CIFError):
    """The text could not be split into CIF tokens."""

    def __init__(self, line_num: int, text: str):
        super().__init__(line_num, text)
        self.line_num = line_num
        self.text = text

    def __str__(self) -> str:
        return "[line: %d] %s" % (self.line_num, self.text)


class MalformedNumericError(CIFError, ValueError):
    """A cell that must hold a number does not."""

    def __init__(self, value: str, what: str = "number"):
        super().__init__(f"expected {what}, got {value!r}")
        self.value = value


class FormatPreconditionError(AssertionError):
    """A field documented as exactly one character is empty or longer.

    Signals corrupt input, not a recoverable condition; handlers of
    CIFError do not catch it.
    """
