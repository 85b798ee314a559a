"""Serialization utilities for edit VM trees: HTML output and JSON documents."""

from __future__ import annotations

import json
from typing import Any

from .node import Node, text

# HTML5 void elements (no closing tag)
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# Root container names rendered as their children only
DOCUMENT_NAMES = frozenset({"document", "#document", "#document-fragment"})


def _escape_text(value: str | None) -> str:
    if not value:
        return ""
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str | None) -> str:
    if value is None:
        return ""
    return str(value).replace("&", "&amp;").replace('"', "&quot;")


def serialize_start_tag(name: str, attrs: dict[str, str] | None) -> str:
    parts = [name]
    for key, value in (attrs or {}).items():
        if value == "":
            parts.append(key)
        else:
            parts.append(f'{key}="{_escape_attr_value(value)}"')
    return f"<{' '.join(parts)}>"


def to_html(node: Node, indent: int = 0, indent_size: int = 2, pretty: bool = False) -> str:
    """Convert a tree to HTML; document roots render as their children."""
    if node.tag_name in DOCUMENT_NAMES:
        sep = "\n" if pretty else ""
        return sep.join(_node_to_html(child, indent, indent_size, pretty) for child in node.children)
    return _node_to_html(node, indent, indent_size, pretty)


def _node_to_html(node: Node, indent: int, indent_size: int, pretty: bool) -> str:
    prefix = " " * (indent * indent_size) if pretty else ""

    if node.is_text:
        return f"{prefix}{_escape_text(node.text_content)}"

    name = node.tag_name
    start = serialize_start_tag(name, node.attributes)
    if name in VOID_ELEMENTS:
        return f"{prefix}{start}"

    children = node.children
    if not children:
        return f"{prefix}{start}</{name}>"

    # Text-only content stays on one line
    if not pretty or all(c.is_text for c in children):
        inner = "".join(_node_to_html(c, 0, indent_size, False) for c in children)
        return f"{prefix}{start}{inner}</{name}>"

    parts = [f"{prefix}{start}"]
    parts.extend(_node_to_html(child, indent + 1, indent_size, pretty) for child in children)
    parts.append(f"{prefix}</{name}>")
    return "\n".join(parts)


def to_test_format(node: Node) -> str:
    return node.to_test_format()


def to_json_data(node: Node) -> Any:
    """Text leaves become strings; elements become tag/attrs/children objects."""
    if node.is_text:
        return node.text_content
    data: dict[str, Any] = {"tag": node.tag_name}
    if node.attributes:
        data["attrs"] = dict(node.attributes)
    data["children"] = [to_json_data(child) for child in node.children]
    return data


def from_json_data(data: Any) -> Node:
    if isinstance(data, str):
        return text(data)
    if not isinstance(data, dict) or not isinstance(data.get("tag"), str):
        msg = f"Expected a string or an object with a 'tag' key, got {data!r}"
        raise ValueError(msg)
    attrs = data.get("attrs") or {}
    if not isinstance(attrs, dict):
        msg = f"'attrs' of <{data['tag']}> must be an object"
        raise ValueError(msg)
    node = Node(data["tag"], attrs)
    for child in data.get("children") or []:
        node.append_child(from_json_data(child))
    return node


def load_document(source: str) -> Node:
    """Parse a JSON document; a top-level array becomes a #document root."""
    data = json.loads(source)
    if isinstance(data, list):
        root = Node("#document")
        for child in data:
            root.append_child(from_json_data(child))
        return root
    root = from_json_data(data)
    if root.is_text:
        msg = "Document root must be an element"
        raise ValueError(msg)
    return root


def dump_document(node: Node, indent: int | None = None) -> str:
    if node.tag_name in DOCUMENT_NAMES:
        return json.dumps([to_json_data(child) for child in node.children], indent=indent)
    return json.dumps(to_json_data(node), indent=indent)
