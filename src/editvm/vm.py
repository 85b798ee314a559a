"""Stack-based interpreter that replays structural edits against a live tree.

The cursor is a stack of (container, index) frames. The bottom frame always
addresses the root; the top frame is the container the next instruction
works on, and its index points at the "current node" (or past the last
child when the cursor sits at the end).
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from .errors import CannotUnenterRoot, NoCurrentNode, NotAnElement, OutOfRange, ProgramError
from .flags import DEFAULT_WRAP_CURSOR, DEFAULT_WRAPPER_TAG, WRAP_CURSOR_MODES, env_debug_enabled
from .node import Node, text

if TYPE_CHECKING:
    from collections.abc import Mapping


class Frame:
    __slots__ = ("container", "index")

    def __init__(self, container: Node, index: int = 0) -> None:
        self.container = container
        self.index = index

    def __repr__(self) -> str:
        return f"Frame({self.container!r}, index={self.index})"


class CursorStack:
    """Nested (container, index) frames, root frame at the bottom."""

    __slots__ = ("frames",)

    def __init__(self, root: Node) -> None:
        self.frames: list[Frame] = [Frame(root, 0)]

    @property
    def depth(self) -> int:
        return len(self.frames)

    def top(self) -> Frame:
        if not self.frames:
            raise OutOfRange("cursor stack is empty")
        frame = self.frames[-1]
        count = len(frame.container.children)
        if frame.index < 0 or frame.index > count:
            raise OutOfRange(f"cursor index {frame.index} outside [0, {count}] in {frame.container!r}")
        return frame

    def current_node(self) -> Node | None:
        frame = self.top()
        children = frame.container.children
        if frame.index == len(children):
            return None
        return children[frame.index]

    def push(self, container: Node) -> Frame:
        frame = Frame(container, 0)
        self.frames.append(frame)
        return frame

    def pop(self) -> Frame:
        return self.frames.pop()

    def check(self) -> None:
        """Raise OutOfRange unless every frame's index lies within its container."""
        for frame in self.frames:
            count = len(frame.container.children)
            if frame.index < 0 or frame.index > count:
                raise OutOfRange(f"cursor index {frame.index} outside [0, {count}] in {frame.container!r}")

    def is_done(self) -> bool:
        if not self.frames:
            return True
        if len(self.frames) != 1:
            return False
        frame = self.frames[0]
        return frame.index == len(frame.container.children)


# Instruction names as they appear in encoded programs, mapped to methods
INSTRUCTIONS = {
    "Enter": "enter",
    "Unenter": "unenter",
    "AdvanceElements": "advance_elements",
    "DeleteElements": "delete_elements",
    "InsertDocString": "insert_doc_string",
    "WrapPrevious": "wrap_previous",
    "UnwrapSelf": "unwrap_self",
}


def _check_count(op: str, n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise OutOfRange(f"{op} expects an integer count, got {n!r}", op=op)
    if n < 0:
        raise OutOfRange(f"{op} count must be non-negative, got {n}", op=op)
    return n


class TreeVM:
    """Applies edit instructions to the tree rooted at ``root``.

    The VM never owns nodes: it mutates the tree it was given in place and
    only keeps references in its cursor stack. Errors are fatal; a failing
    instruction leaves the tree as it was at the point of failure.

    Options:
        debug: trace every instruction to stderr (also ``EDITVM_DEBUG=1``).
        wrap_cursor: ``"literal"`` keeps the stored index untouched after
            WrapPrevious and records the drift in ``index_drift``;
            ``"after"`` moves the cursor to just past the new wrapper.
        wrapper_tag: tag name of the element WrapPrevious creates.
    """

    __slots__ = ("env_debug", "index_drift", "root", "stack", "wrap_cursor", "wrapper_tag")

    def __init__(
        self,
        root: Node,
        *,
        debug: bool = False,
        wrap_cursor: str | None = None,
        wrapper_tag: str | None = None,
    ) -> None:
        if not root.is_element:
            raise NotAnElement(f"VM root must be an element, got {root!r}")
        mode = wrap_cursor or DEFAULT_WRAP_CURSOR
        if mode not in WRAP_CURSOR_MODES:
            msg = f"wrap_cursor must be one of {WRAP_CURSOR_MODES}, got {mode!r}"
            raise ValueError(msg)

        self.root = root
        self.stack = CursorStack(root)
        self.env_debug = bool(debug) or env_debug_enabled()
        self.wrap_cursor = mode
        self.wrapper_tag = wrapper_tag or DEFAULT_WRAPPER_TAG
        self.index_drift = 0

    def debug(self, message: str, indent: int = 2) -> None:
        if self.env_debug:
            pad = " " * (indent * self.stack.depth)
            print(f"{pad}TreeVM: {message}", file=sys.stderr)

    # Queries

    @property
    def depth(self) -> int:
        return self.stack.depth

    def current_node(self) -> Node | None:
        return self.stack.current_node()

    def is_done(self) -> bool:
        return self.stack.is_done()

    def apply(self, opcode: str, *args: object) -> None:
        """Run one instruction given by name (``"Enter"`` or ``"enter"``)."""
        name = INSTRUCTIONS.get(opcode)
        if name is None:
            if opcode not in INSTRUCTIONS.values():
                raise ProgramError(f"Unknown instruction {opcode!r}")
            name = opcode
        getattr(self, name)(*args)

    # Instructions

    def enter(self) -> None:
        node = self.stack.current_node()
        if node is None or not node.is_element:
            raise NotAnElement(f"cannot enter {node!r}", op="Enter")
        self.stack.push(node)
        self.debug(f"Enter {node!r}")

    def unenter(self) -> None:
        if self.stack.depth <= 1:
            raise CannotUnenterRoot("the root frame cannot be exited", op="Unenter")
        exited = self.stack.pop()
        frame = self.stack.top()
        # The container just exited counts as consumed
        frame.index += 1
        count = len(frame.container.children)
        if frame.index > count:
            raise OutOfRange(f"index {frame.index} past {count} children after leaving {exited.container!r}", op="Unenter")
        self.debug(f"Unenter {exited.container!r} -> index {frame.index}")

    def advance_elements(self, n: int) -> None:
        _check_count("AdvanceElements", n)
        frame = self.stack.top()
        target = frame.index + n
        count = len(frame.container.children)
        if target > count:
            raise OutOfRange(f"cannot advance {n} from {frame.index}, only {count} children", op="AdvanceElements")
        frame.index = target
        self.debug(f"AdvanceElements({n}) -> index {target}")

    def delete_elements(self, n: int) -> None:
        _check_count("DeleteElements", n)
        frame = self.stack.top()
        for i in range(n):
            # Removal shifts later siblings left, so the index never moves
            node = self.stack.current_node()
            if node is None:
                raise NoCurrentNode(f"ran out of siblings after deleting {i} of {n}", op="DeleteElements")
            frame.container.remove_child(node)
        self.debug(f"DeleteElements({n}) at index {frame.index}")

    def insert_doc_string(self, s: str) -> None:
        frame = self.stack.top()
        node = text(s)
        frame.container.insert_before(node, self.stack.current_node())
        self.debug(f"InsertDocString({s!r}) at index {frame.index}")

    def wrap_previous(self, n: int, attrs: Mapping[str, str] | None = None) -> None:
        _check_count("WrapPrevious", n)
        frame = self.stack.top()
        if n > frame.index:
            raise OutOfRange(f"needs {n} preceding siblings, only {frame.index} available", op="WrapPrevious")

        wrapper = Node(self.wrapper_tag)
        for key, value in (attrs or {}).items():
            wrapper.set_attribute(key, value)

        container = frame.container
        container.insert_before(wrapper, self.stack.current_node())
        for _ in range(n):
            wrapper.insert_before(wrapper.previous_sibling, wrapper.first_child)

        after = frame.index - n + 1
        if self.wrap_cursor == "after":
            frame.index = after
        self.index_drift = frame.index - after
        self.debug(f"WrapPrevious({n}, {dict(wrapper.attributes)!r}) -> {wrapper!r}")
        if self.index_drift > 0:
            self.debug(f"index {frame.index} sits {self.index_drift} past the wrapper's successor")

    def unwrap_self(self) -> None:
        if self.stack.depth <= 1:
            raise CannotUnenterRoot("the root cannot unwrap itself", op="UnwrapSelf")
        node = self.stack.pop().container
        frame = self.stack.top()
        container = frame.container
        if node.parent is not container:
            raise OutOfRange(f"{node!r} is no longer a child of {container!r}", op="UnwrapSelf")
        moved = 0
        while node.children:
            frame.index += 1
            container.insert_before(node.first_child, node)
            moved += 1
        container.remove_child(node)
        self.debug(f"UnwrapSelf {node!r} spliced {moved} -> index {frame.index}")
