"""DOM-like document tree used as the VM's edit target."""

from __future__ import annotations

TEXT = "#text"


class Node:
    """Represents a DOM-like node.
    - tag_name: e.g., 'div', 'p', etc. Use '#text' for text nodes.
    - attributes: dict of tag attributes
    - children: list of child Nodes
    - parent: reference to parent Node (or None for root)
    - next_sibling/previous_sibling: references to adjacent nodes in the tree.
    """

    __slots__ = (
        "attributes",
        "children",
        "next_sibling",
        "parent",
        "previous_sibling",
        "tag_name",
        "text_content",
    )

    def __init__(self, tag_name, attributes=None, text_content=None):
        if tag_name is None or tag_name == "":
            msg = "Empty tag_name passed to Node constructor"
            raise ValueError(
                msg,
            )

        self.tag_name = tag_name
        # Keep first occurrence of each key; attribute order carries no meaning
        kept = {}
        if attributes:
            for k, v in attributes.items():
                if k not in kept:
                    kept[str(k)] = str(v)
        self.attributes = kept
        self.children = []
        self.parent = None
        # Payload for text nodes; unused on elements
        self.text_content = text_content if text_content is not None else ""
        self.next_sibling = None
        self.previous_sibling = None

    @property
    def is_text(self):
        return self.tag_name == TEXT

    @property
    def is_element(self):
        return self.tag_name != TEXT

    @property
    def first_child(self):
        return self.children[0] if self.children else None

    @property
    def last_child(self):
        return self.children[-1] if self.children else None

    def index_in_parent(self):
        """Position of this node among its parent's children, or -1 when detached."""
        if self.parent is None:
            return -1
        return self.parent.children.index(self)

    def set_attribute(self, key, value):
        if self.is_text:
            msg = f"Cannot set attribute {key!r} on a text node"
            raise ValueError(msg)
        self.attributes[str(key)] = str(value)

    def _check_can_adopt(self, child):
        if self.is_text:
            msg = f"Text nodes cannot have children (tried to add {child.tag_name})"
            raise ValueError(msg)
        if self._would_create_circular_reference(child):
            msg = f"Adding {child.tag_name} as child of {self.tag_name} would create circular reference"
            raise ValueError(
                msg,
            )

    def _detach(self, child):
        """Unlink child from its current parent, keeping its subtree."""
        if child.previous_sibling:
            child.previous_sibling.next_sibling = child.next_sibling
        if child.next_sibling:
            child.next_sibling.previous_sibling = child.previous_sibling
        child.parent.children.remove(child)
        child.parent = None
        child.next_sibling = None
        child.previous_sibling = None

    def append_child(self, child):
        self._check_can_adopt(child)

        if child.parent:
            self._detach(child)

        # Update sibling links in new location
        if self.children:
            self.children[-1].next_sibling = child
            child.previous_sibling = self.children[-1]
        else:
            child.previous_sibling = None

        child.parent = self
        child.next_sibling = None
        self.children.append(child)

    def _would_create_circular_reference(self, child):
        """Check if adding child would create a circular reference."""
        if child is self:
            return True
        # Fast path: a node without children can't be our ancestor
        if not child.children:
            return False

        current = self.parent
        while current is not None:
            if current is child:
                return True
            current = current.parent
        return False

    def insert_child_at(self, index, child):
        """Insert a child at the specified index (appends when out of bounds)."""
        self._check_can_adopt(child)
        if child.parent:
            self._detach(child)

        if index < 0 or index >= len(self.children):
            self.append_child(child)
            return
        self.insert_before(child, self.children[index])

    def insert_before(self, new_node, reference_node):
        """Insert new_node before reference_node; a None reference appends."""
        if reference_node is None:
            self.append_child(new_node)
            return
        if reference_node.parent is not self:
            return

        self._check_can_adopt(new_node)
        if new_node is reference_node:
            return

        if new_node.parent:
            self._detach(new_node)

        idx = self.children.index(reference_node)
        new_node.parent = self
        self.children.insert(idx, new_node)

        # Update sibling pointers
        new_node.next_sibling = reference_node
        new_node.previous_sibling = reference_node.previous_sibling
        reference_node.previous_sibling = new_node
        if new_node.previous_sibling:
            new_node.previous_sibling.next_sibling = new_node

    def remove_child(self, child):
        """Remove a child node, updating all sibling links.

        Args:
            child: The Node to remove

        """
        if child.parent is not self:
            return
        self._detach(child)

    def __repr__(self):
        if self.is_text:
            return f"Node(#text='{self.text_content[:30]}')"
        return f"Node(<{self.tag_name}>, children={len(self.children)})"

    def to_test_format(self, indent=0):
        if self.tag_name in {"document", "#document", "#document-fragment"}:
            return "\n".join(child.to_test_format(0) for child in self.children)
        if self.is_text:
            return f'| {" " * indent}"{self.text_content}"'

        result = f"| {' ' * indent}<{self.tag_name}>"
        # Attributes on their own lines, sorted for deterministic output
        for key, value in sorted(self.attributes.items()):
            result += f'\n| {" " * (indent + 2)}{key}="{value}"'

        if self.children:
            parts = [result]
            parts.extend(child.to_test_format(indent + 2) for child in self.children)
            return "\n".join(parts)
        return result


def text(data):
    """Create a detached text leaf."""
    return Node(TEXT, text_content=str(data))


def element(tag_name, attributes=None, *children):
    """Create an element and append the given children (strings become text leaves)."""
    node = Node(tag_name, attributes)
    for child in children:
        node.append_child(text(child) if isinstance(child, str) else child)
    return node
