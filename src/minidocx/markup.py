"""Ordered markup tree used to build every OOXML part.

A :class:`MarkupNode` is a named element with ordered attributes, ordered
children, optional text content and a self-closing flag.  Attribute and
child order are kept exactly as inserted because some WordprocessingML
consumers are sensitive to element position.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import IO, Optional

from minidocx.errors import FormatError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

# Characters XML 1.0 cannot carry, escaped or not.
_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _escape_text(s: str) -> str:
    """Escape character data."""
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _escape_attr(s: str) -> str:
    """Escape an attribute value for a double-quoted attribute."""
    return _escape_text(s).replace('"', "&quot;")


def invalid_char(s: str) -> Optional[str]:
    """Return the first character of *s* that XML 1.0 cannot represent."""
    match = _INVALID_CHARS.search(s)
    return match.group() if match else None


def strip_invalid_chars(s: str) -> str:
    return _INVALID_CHARS.sub("", s)


def _check_chars(tag: str, what: str, value: str) -> None:
    bad = invalid_char(value)
    if bad is not None:
        raise FormatError(f"<{tag}> {what} contains character U+{ord(bad):04X}, not allowed in XML")


# ---------------------------------------------------------------------------
# MarkupNode
# ---------------------------------------------------------------------------

class MarkupNode:
    """A single element of a markup tree.

    Usage::

        rpr = MarkupNode("w:rPr")
        rpr.add_child(MarkupNode.empty("w:sz", {"w:val": "40"}))
        serialize(rpr)   # '<w:rPr><w:sz w:val="40"/></w:rPr>'
    """

    __slots__ = ("tag", "attributes", "children", "_text", "_self_closing", "_parent")

    def __init__(
        self,
        tag: str,
        attributes: Optional[dict[str, str]] = None,
        *,
        text: Optional[str] = None,
        self_closing: bool = False,
    ) -> None:
        if not tag:
            raise FormatError("markup node requires a non-empty tag")
        if self_closing and text:
            raise FormatError(f"self-closing <{tag}> cannot carry text")
        if text:
            _check_chars(tag, "text", text)
        self.tag = tag
        self.attributes: dict[str, str] = {}
        self.children: list[MarkupNode] = []
        self._text: Optional[str] = text
        self._self_closing = self_closing
        self._parent: Optional[MarkupNode] = None
        for key, value in (attributes or {}).items():
            self.set(key, value)

    @classmethod
    def empty(cls, tag: str, attributes: Optional[dict[str, str]] = None) -> MarkupNode:
        """Return a self-closing leaf such as ``<w:b/>``."""
        return cls(tag, attributes, self_closing=True)

    # -- attributes ---------------------------------------------------------

    def set(self, key: str, value: str) -> MarkupNode:
        """Set attribute *key*; new keys are appended after existing ones."""
        value = str(value)
        _check_chars(self.tag, f"attribute {key!r}", value)
        self.attributes[key] = value
        return self

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(key, default)

    # -- text / self-closing ------------------------------------------------

    @property
    def text(self) -> Optional[str]:
        return self._text

    @text.setter
    def text(self, value: Optional[str]) -> None:
        if self._self_closing and value:
            raise FormatError(f"self-closing <{self.tag}> cannot carry text")
        if value:
            _check_chars(self.tag, "text", value)
        self._text = value

    @property
    def self_closing(self) -> bool:
        return self._self_closing

    @self_closing.setter
    def self_closing(self, value: bool) -> None:
        if value and (self.children or self._text):
            raise FormatError(
                f"<{self.tag}> has content and cannot be made self-closing"
            )
        self._self_closing = value

    # -- children -----------------------------------------------------------

    def add_child(self, child: MarkupNode) -> MarkupNode:
        """Append *child* and return it.

        The child becomes owned by this node: it cannot be attached to a
        second parent, and a node cannot contain itself or an ancestor.
        """
        if self._self_closing:
            raise FormatError(f"self-closing <{self.tag}> cannot have children")
        if child._parent is not None:
            raise FormatError(f"<{child.tag}> already belongs to <{child._parent.tag}>")
        ancestor: Optional[MarkupNode] = self
        while ancestor is not None:
            if ancestor is child:
                raise FormatError(f"adding <{child.tag}> would create a cycle")
            ancestor = ancestor._parent
        child._parent = self
        self.children.append(child)
        return child

    def find(self, tag: str) -> Optional[MarkupNode]:
        """Return the first direct child named *tag*."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def findall(self, tag: str) -> list[MarkupNode]:
        return [child for child in self.children if child.tag == tag]

    def __repr__(self) -> str:
        return f"<MarkupNode {self.tag} attrs={len(self.attributes)} children={len(self.children)}>"


def node(tag: str) -> MarkupNode:
    """Construct an empty node."""
    return MarkupNode(tag)


def sub_node(
    parent: MarkupNode,
    tag: str,
    attributes: Optional[dict[str, str]] = None,
    *,
    text: Optional[str] = None,
    self_closing: bool = False,
) -> MarkupNode:
    """Create a node, attach it to *parent* and return it."""
    return parent.add_child(
        MarkupNode(tag, attributes, text=text, self_closing=self_closing)
    )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _render(elem: MarkupNode, out: list[str]) -> None:
    a = out.append
    a(f"<{elem.tag}")
    for key, value in elem.attributes.items():
        a(f' {key}="{_escape_attr(value)}"')
    if elem.self_closing:
        a("/>")
        return
    a(">")
    for child in elem.children:
        _render(child, out)
    if elem.text:
        a(_escape_text(elem.text))
    a(f"</{elem.tag}>")


def serialize(elem: MarkupNode) -> str:
    """Return the markup text for *elem* and its subtree."""
    out: list[str] = []
    _render(elem, out)
    return "".join(out)


def to_xml(elem: MarkupNode) -> str:
    """Return a standalone XML document with declaration."""
    return XML_DECLARATION + "\n" + serialize(elem)


def print_node(elem: MarkupNode, file: Optional[IO[str]] = None) -> None:
    """Write the serialization of *elem* to *file* (stdout by default)."""
    stream = file if file is not None else sys.stdout
    stream.write(serialize(elem) + "\n")


def write(elem: MarkupNode, path: str | Path) -> None:
    """Write *elem* as a UTF-8 XML file at *path*.

    Raises:
        OSError: if the destination cannot be created or written.
    """
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(to_xml(elem))
