from .errors import CannotUnenterRoot, NoCurrentNode, NotAnElement, OutOfRange, ProgramError, VMError
from .node import Node, element, text
from .program import Instruction, Opcode, apply_program, dump_program, load_program, parse_program, run_program
from .serialize import dump_document, load_document, to_html, to_test_format
from .vm import CursorStack, Frame, TreeVM

__all__ = [
    "CannotUnenterRoot",
    "CursorStack",
    "Frame",
    "Instruction",
    "NoCurrentNode",
    "Node",
    "NotAnElement",
    "Opcode",
    "OutOfRange",
    "ProgramError",
    "TreeVM",
    "VMError",
    "apply_program",
    "dump_document",
    "dump_program",
    "element",
    "load_document",
    "load_program",
    "parse_program",
    "run_program",
    "text",
    "to_html",
    "to_test_format",
]
