"""Encoded edit programs and the driver that feeds them to a VM.

A program is an ordered list of tagged entries, the opcode first and its
arguments after it::

    [
        ["Enter"],
        ["DeleteElements", 1],
        ["InsertDocString", "Goodbye, "],
        ["UnwrapSelf"],
        ["WrapPrevious", 2, {"class": "cool"}],
    ]

Decoding validates argument shapes once so the VM only ever sees
well-typed calls.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import OutOfRange, ProgramError, VMError
from .vm import INSTRUCTIONS, TreeVM

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .node import Node


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class Opcode(_StrEnum):
    ENTER = "Enter"
    UNENTER = "Unenter"
    ADVANCE_ELEMENTS = "AdvanceElements"
    DELETE_ELEMENTS = "DeleteElements"
    INSERT_DOC_STRING = "InsertDocString"
    WRAP_PREVIOUS = "WrapPrevious"
    UNWRAP_SELF = "UnwrapSelf"


# Expected argument kinds per opcode: "count", "string", "attrs"
_SIGNATURES: dict[Opcode, tuple[str, ...]] = {
    Opcode.ENTER: (),
    Opcode.UNENTER: (),
    Opcode.ADVANCE_ELEMENTS: ("count",),
    Opcode.DELETE_ELEMENTS: ("count",),
    Opcode.INSERT_DOC_STRING: ("string",),
    Opcode.WRAP_PREVIOUS: ("count", "attrs"),
    Opcode.UNWRAP_SELF: (),
}


def _check_arg(opcode: Opcode, kind: str, value: Any) -> Any:
    if kind == "count":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ProgramError(f"{opcode.value} expects a non-negative integer, got {value!r}")
        return value
    if kind == "string":
        if not isinstance(value, str):
            raise ProgramError(f"{opcode.value} expects a string, got {type(value).__name__}")
        return value
    # attrs
    if not isinstance(value, dict):
        raise ProgramError(f"{opcode.value} expects an attribute mapping, got {type(value).__name__}")
    for key, attr_value in value.items():
        if not isinstance(key, str) or not isinstance(attr_value, str):
            raise ProgramError(f"{opcode.value} attributes must map strings to strings, got {key!r}: {attr_value!r}")
    return dict(value)


@dataclass(frozen=True, slots=True)
class Instruction:
    opcode: Opcode
    args: tuple[Any, ...]

    def __init__(self, opcode: Opcode | str, *args: Any) -> None:
        try:
            op = Opcode(opcode)
        except ValueError:
            raise ProgramError(f"Unknown instruction {opcode!r}") from None

        signature = _SIGNATURES[op]
        if op is Opcode.WRAP_PREVIOUS and len(args) == 1:
            # Attributes may be omitted
            args = (args[0], {})
        if len(args) != len(signature):
            raise ProgramError(f"{op.value} takes {len(signature)} argument(s), got {len(args)}")

        checked = tuple(_check_arg(op, kind, value) for kind, value in zip(signature, args))
        object.__setattr__(self, "opcode", op)
        object.__setattr__(self, "args", checked)

    def to_list(self) -> list[Any]:
        return [self.opcode.value, *self.args]

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.args)
        return f"{self.opcode.value}({args})"


def parse_program(data: Iterable[Any]) -> list[Instruction]:
    """Decode tagged entries (lists or tuples, opcode first) into instructions."""
    program: list[Instruction] = []
    for step, entry in enumerate(data):
        if isinstance(entry, Instruction):
            program.append(entry)
            continue
        if isinstance(entry, str):
            entry = [entry]
        if not isinstance(entry, (list, tuple)) or not entry:
            raise ProgramError(f"expected a non-empty [opcode, *args] entry, got {entry!r}", step=step)
        try:
            program.append(Instruction(entry[0], *entry[1:]))
        except ProgramError as exc:
            raise ProgramError(str(exc), step=step) from None
    return program


def load_program(source: str) -> list[Instruction]:
    try:
        data = json.loads(source)
    except json.JSONDecodeError as exc:
        raise ProgramError(f"invalid JSON program: {exc}") from exc
    if not isinstance(data, list):
        raise ProgramError("a program must be a JSON array of instructions")
    return parse_program(data)


def dump_program(program: Sequence[Instruction]) -> str:
    return json.dumps([instruction.to_list() for instruction in program])


def run_program(vm: TreeVM, program: Iterable[Any], *, require_done: bool = False) -> TreeVM:
    """Feed every instruction to ``vm`` in order.

    The first failing instruction aborts the run; its error carries the
    instruction name and step. No rollback is attempted.
    """
    step = -1
    for step, instruction in enumerate(parse_program(program)):
        method = getattr(vm, INSTRUCTIONS[instruction.opcode.value])
        try:
            method(*instruction.args)
        except VMError as exc:
            exc.op = instruction.opcode.value
            exc.step = step
            raise

    if require_done and not vm.is_done():
        raise OutOfRange(
            f"program ended at depth {vm.depth} before reaching the end of the root",
            op="end",
            step=step + 1,
        )
    return vm


def apply_program(root: Node, program: Iterable[Any], *, require_done: bool = False, **vm_options: Any) -> TreeVM:
    """Run ``program`` against ``root`` with a fresh VM and return the VM."""
    vm = TreeVM(root, **vm_options)
    return run_program(vm, program, require_done=require_done)
