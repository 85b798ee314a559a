"""Errors raised while decoding or running an edit program.

Every VM error is fatal to the run: the instruction that failed stops
immediately and the tree is left in whatever state it reached.
"""

from __future__ import annotations


class VMError(Exception):
    """Base class for instruction failures."""

    code = "vm-error"

    def __init__(self, message: str | None = None, *, op: str | None = None, step: int | None = None) -> None:
        self.message = message or self.code
        self.op = op
        self.step = step
        super().__init__(self.message)

    def __repr__(self) -> str:
        if self.step is not None:
            return f"{type(self).__name__}({self.message!r}, op={self.op!r}, step={self.step})"
        return f"{type(self).__name__}({self.message!r})"

    def __str__(self) -> str:
        prefix = ""
        if self.op is not None:
            prefix = f"{self.op}: " if self.step is None else f"{self.op} at step {self.step}: "
        if self.message != self.code:
            return f"{prefix}{self.code} - {self.message}"
        return f"{prefix}{self.code}"


class NotAnElement(VMError):
    code = "not-an-element"


class CannotUnenterRoot(VMError):
    code = "cannot-unenter-root"


class NoCurrentNode(VMError):
    code = "no-current-node"


class OutOfRange(VMError):
    code = "out-of-range"


class ProgramError(ValueError):
    """A program entry could not be decoded into an instruction."""

    def __init__(self, message: str, *, step: int | None = None) -> None:
        self.step = step
        if step is not None:
            message = f"step {step}: {message}"
        super().__init__(message)
