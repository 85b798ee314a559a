from __future__ import annotations

import json
import unittest

from editvm import dump_document, element, load_document, text, to_html
from editvm.serialize import from_json_data, to_json_data


class TestToHtml(unittest.TestCase):
    def test_document_renders_children_only(self) -> None:
        root = element("#document", None, element("p", {"class": "x"}, "Hello"), "tail")
        assert to_html(root) == '<p class="x">Hello</p>tail'

    def test_escaping(self) -> None:
        node = element("a", {"title": 'say "hi" & go'}, "1 < 2 & 3 > 2")
        assert to_html(node) == '<a title="say &quot;hi&quot; &amp; go">1 &lt; 2 &amp; 3 &gt; 2</a>'

    def test_empty_attribute_is_minimized(self) -> None:
        assert to_html(element("input", {"disabled": ""})) == "<input disabled>"

    def test_void_and_empty_elements(self) -> None:
        assert to_html(element("br")) == "<br>"
        assert to_html(element("div")) == "<div></div>"

    def test_pretty_indents_nested_elements(self) -> None:
        root = element("div", None, element("p", None, "a"), element("p", None, "b"))
        assert to_html(root, pretty=True) == "<div>\n  <p>a</p>\n  <p>b</p>\n</div>"


class TestJsonDocuments(unittest.TestCase):
    def test_json_data_shape(self) -> None:
        node = element("p", {"id": "x"}, "a", element("b"))
        assert to_json_data(node) == {
            "tag": "p",
            "attrs": {"id": "x"},
            "children": ["a", {"tag": "b", "children": []}],
        }
        assert to_json_data(text("t")) == "t"

    def test_from_json_data_builds_linked_tree(self) -> None:
        node = from_json_data({"tag": "p", "children": ["a", {"tag": "b", "attrs": {"k": "v"}}]})
        assert node.children[1].attributes == {"k": "v"}
        assert node.children[0].next_sibling is node.children[1]
        assert node.children[1].parent is node

    def test_from_json_data_rejects_bad_shapes(self) -> None:
        with self.assertRaises(ValueError):
            from_json_data(3)
        with self.assertRaises(ValueError):
            from_json_data({"children": []})
        with self.assertRaises(ValueError):
            from_json_data({"tag": "p", "attrs": ["x"]})

    def test_top_level_array_becomes_document(self) -> None:
        root = load_document('[{"tag": "p", "children": ["Hello, ", "World"]}]')
        assert root.tag_name == "#document"
        assert to_html(root) == "<p>Hello, World</p>"
        assert json.loads(dump_document(root)) == [{"tag": "p", "children": ["Hello, ", "World"]}]

    def test_document_root_must_be_element(self) -> None:
        with self.assertRaises(ValueError):
            load_document('"just text"')


if __name__ == "__main__":
    unittest.main()
