"""Command line driver: apply a JSON edit program to a JSON document."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .errors import ProgramError, VMError
from .flags import WRAP_CURSOR_MODES
from .program import apply_program, load_program
from .serialize import dump_document, load_document, to_html, to_test_format


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="editvm",
        description="Apply a structural edit program to a document tree",
    )
    parser.add_argument("document", type=Path, help="JSON document (use - for stdin)")
    parser.add_argument("program", type=Path, help="JSON program: a list of [opcode, *args] entries")
    parser.add_argument(
        "--format", "-f",
        choices=["html", "test", "json"],
        default="html",
        help="Output format for the edited tree (default: html)",
    )
    parser.add_argument(
        "--wrap-cursor",
        choices=WRAP_CURSOR_MODES,
        default=None,
        help="Cursor handling after WrapPrevious (default: literal)",
    )
    parser.add_argument(
        "--wrapper-tag",
        default=None,
        help="Tag name for elements created by WrapPrevious (default: div)",
    )
    parser.add_argument(
        "--require-done",
        action="store_true",
        help="Fail unless the program finishes at the end of the root",
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Trace every instruction to stderr",
    )
    return parser


def _read(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        root = load_document(_read(args.document))
        program = load_program(_read(args.program))
        apply_program(
            root,
            program,
            require_done=args.require_done,
            debug=args.debug,
            wrap_cursor=args.wrap_cursor,
            wrapper_tag=args.wrapper_tag,
        )
    except (VMError, ProgramError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.format == "json":
        print(dump_document(root, indent=2))
    elif args.format == "test":
        print(to_test_format(root))
    else:
        print(to_html(root, pretty=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
