"""
Error taxonomy for the practice engine.

These exceptions are raised by lookup and validation helpers inside the
engine and are always caught at the command/query boundary, where they are
logged and turned into a neutral result. None of them reach the caller of
``PracticeService`` or the guidance functions.
"""

from __future__ import annotations


class StepwiseError(Exception):
    """Base class for recoverable engine conditions."""


class InvalidReference(StepwiseError):
    """A command named a profile, session, subject or word that does not exist."""

    def __init__(self, kind: str, ref: str | None):
        self.kind = kind
        self.ref = ref
        super().__init__(f"unknown {kind}: {ref!r}")


class ExhaustedPool(StepwiseError):
    """No candidate words remain to build a session for a subject."""

    def __init__(self, subject: str, level: int | None = None):
        self.subject = subject
        self.level = level
        where = f" at level {level}" if level is not None else ""
        super().__init__(f"no practice content left for {subject}{where}")


class OutOfRangeInput(StepwiseError):
    """A count, index or step fell outside its valid range."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"{field} out of range: {value!r}")
