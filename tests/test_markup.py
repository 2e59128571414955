"""Tests for the markup tree."""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET

import pytest

from minidocx.errors import FormatError
from minidocx.markup import (
    XML_DECLARATION,
    MarkupNode,
    node,
    print_node,
    serialize,
    sub_node,
    to_xml,
    write,
)


class TestConstruction:

    def test_node_is_empty(self):
        n = node("w:body")
        assert n.tag == "w:body"
        assert n.attributes == {}
        assert n.children == []
        assert n.text is None
        assert not n.self_closing

    def test_empty_tag_rejected(self):
        with pytest.raises(FormatError):
            MarkupNode("")

    def test_attribute_order_is_insertion_order(self):
        n = MarkupNode("w:pgMar")
        for key in ("w:top", "w:right", "w:bottom", "w:left"):
            n.set(key, "1134")
        assert list(n.attributes) == ["w:top", "w:right", "w:bottom", "w:left"]

    def test_set_returns_node(self):
        n = MarkupNode("w:t")
        assert n.set("xml:space", "preserve") is n

    def test_sub_node_attaches(self):
        parent = MarkupNode("w:r")
        child = sub_node(parent, "w:t", text="hi")
        assert parent.children == [child]
        assert child.text == "hi"


class TestStructuralValidation:

    def test_self_closing_rejects_children(self):
        leaf = MarkupNode.empty("w:b")
        with pytest.raises(FormatError):
            leaf.add_child(MarkupNode("w:i"))

    def test_self_closing_rejects_text(self):
        with pytest.raises(FormatError):
            MarkupNode("w:b", text="x", self_closing=True)
        leaf = MarkupNode.empty("w:b")
        with pytest.raises(FormatError):
            leaf.text = "x"

    def test_cannot_make_populated_node_self_closing(self):
        n = MarkupNode("w:r")
        n.add_child(MarkupNode("w:t"))
        with pytest.raises(FormatError):
            n.self_closing = True
        t = MarkupNode("w:t", text="abc")
        with pytest.raises(FormatError):
            t.self_closing = True

    def test_child_cannot_have_two_parents(self):
        child = MarkupNode("w:t")
        MarkupNode("w:r").add_child(child)
        with pytest.raises(FormatError):
            MarkupNode("w:r").add_child(child)

    def test_cycles_rejected(self):
        a = MarkupNode("a")
        b = a.add_child(MarkupNode("b"))
        with pytest.raises(FormatError):
            b.add_child(a)
        with pytest.raises(FormatError):
            a.add_child(a)


class TestCharacterValidation:

    @pytest.mark.parametrize("bad", ["\x00", "\x08", "\x0b", "\x0c", "\x1f", "\ud800", "\uffff"])
    def test_text_rejects_characters_xml_cannot_hold(self, bad):
        with pytest.raises(FormatError, match="not allowed in XML"):
            MarkupNode("w:t", text=f"a{bad}b")
        n = MarkupNode("w:t")
        with pytest.raises(FormatError):
            n.text = f"a{bad}b"
        assert n.text is None

    def test_attribute_rejects_control_character(self):
        n = MarkupNode("w:pStyle")
        with pytest.raises(FormatError, match="w:val"):
            n.set("w:val", "Heading\x01")
        assert n.attributes == {}
        with pytest.raises(FormatError):
            MarkupNode("w:pStyle", {"w:val": "\x02"})

    @pytest.mark.parametrize("ok", ["\t", "\n", "\r", "é", "\U0001f600"])
    def test_whitespace_and_non_ascii_allowed(self, ok):
        n = MarkupNode("w:t", text=f"a{ok}b")
        ET.fromstring(serialize(n).replace("w:t", "t"))


class TestSerialize:

    def test_self_closing(self):
        assert serialize(MarkupNode.empty("w:jc", {"w:val": "start"})) == '<w:jc w:val="start"/>'

    def test_empty_element(self):
        assert serialize(MarkupNode("w:rPr")) == "<w:rPr></w:rPr>"

    def test_children_then_text(self):
        n = MarkupNode("p")
        sub_node(n, "b", self_closing=True)
        n.text = "tail"
        assert serialize(n) == "<p><b/>tail</p>"

    def test_nested(self):
        r = MarkupNode("w:r")
        sub_node(r, "w:rPr").add_child(MarkupNode.empty("w:b"))
        sub_node(r, "w:t", text="bold")
        assert serialize(r) == "<w:r><w:rPr><w:b/></w:rPr><w:t>bold</w:t></w:r>"

    def test_text_escaped(self):
        n = MarkupNode("w:t", text='a < b & c > "d"')
        assert serialize(n) == '<w:t>a &lt; b &amp; c &gt; "d"</w:t>'

    def test_attribute_escaped(self):
        n = MarkupNode.empty("x", {"v": 'say "hi" & <bye>'})
        assert serialize(n) == '<x v="say &quot;hi&quot; &amp; &lt;bye&gt;"/>'

    def test_output_is_well_formed(self):
        root = MarkupNode("root", {"xmlns:w": "urn:test"})
        for i in range(3):
            sub_node(root, "w:item", {"w:n": str(i)}, text=f"<{i}>")
        parsed = ET.fromstring(serialize(root))
        assert [el.text for el in parsed] == ["<0>", "<1>", "<2>"]

    def test_to_xml_has_declaration(self):
        assert to_xml(MarkupNode("a")).startswith(XML_DECLARATION + "\n")


class TestOutput:

    def test_print_node(self):
        buf = io.StringIO()
        print_node(MarkupNode.empty("w:b"), file=buf)
        assert buf.getvalue() == "<w:b/>\n"

    def test_print_node_defaults_to_stdout(self, capsys):
        print_node(MarkupNode("a", text="x"))
        assert capsys.readouterr().out == "<a>x</a>\n"

    def test_write(self, tmp_path):
        path = tmp_path / "part.xml"
        write(MarkupNode("a", text="é"), path)
        data = path.read_bytes().decode("utf-8")
        assert data == XML_DECLARATION + "\n<a>é</a>"

    def test_write_to_missing_directory_fails(self, tmp_path):
        with pytest.raises(OSError):
            write(MarkupNode("a"), tmp_path / "missing" / "part.xml")
