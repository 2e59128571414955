"""WordprocessingML renderer - converts the document model to markup.

This module turns :class:`~minidocx.model.Run`,
:class:`~minidocx.model.Paragraph` and :class:`~minidocx.model.Document`
objects into :class:`~minidocx.markup.MarkupNode` trees for
``word/document.xml``.  Every function is pure: the same model always
produces the same tree.

Font sizes are written in half-points (``w:sz``), so a 20pt run renders as
``<w:sz w:val="40"/>``.  A size is only written when it differs from the
document's ambient size.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from minidocx.markup import MarkupNode, sub_node

if TYPE_CHECKING:
    from minidocx.model import Document, Paragraph, Run

# ---------------------------------------------------------------------------
# Namespaces declared on w:document
# ---------------------------------------------------------------------------

NS = {
    "o": "urn:schemas-microsoft-com:office:office",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "v": "urn:schemas-microsoft-com:vml",
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "w10": "urn:schemas-microsoft-com:office:word",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "wps": "http://schemas.microsoft.com/office/word/2010/wordprocessingShape",
    "wpg": "http://schemas.microsoft.com/office/word/2010/wordprocessingGroup",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
    "wp14": "http://schemas.microsoft.com/office/word/2010/wordprocessingDrawing",
    "w14": "http://schemas.microsoft.com/office/word/2010/wordml",
    "w15": "http://schemas.microsoft.com/office/word/2012/wordml",
}

IGNORABLE = "w14 wp14 w15"

# ---------------------------------------------------------------------------
# Page layout constants (twentieths of a point)
# ---------------------------------------------------------------------------

_A4_WIDTH = 11906    # 210mm
_A4_HEIGHT = 16838   # 297mm
_MARGIN_TOP = 1134   # 20mm
_MARGIN_RIGHT = 1134
_MARGIN_BOTTOM = 1134
_MARGIN_LEFT = 1134
_MARGIN_HEADER = 0
_MARGIN_FOOTER = 0
_MARGIN_GUTTER = 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def half_points(size_pt: int) -> str:
    """Return *size_pt* in the half-point unit used by ``w:sz``."""
    return str(size_pt * 2)


def _paragraph_properties(style: str, justification: str) -> tuple[MarkupNode, MarkupNode]:
    """Build ``w:pPr`` and return it with its (empty) ``w:rPr`` child."""
    ppr = MarkupNode("w:pPr")
    ppr.add_child(MarkupNode.empty("w:pStyle", {"w:val": style}))
    ppr.add_child(MarkupNode.empty("w:bidi", {"w:val": "0"}))
    ppr.add_child(MarkupNode.empty("w:jc", {"w:val": justification}))
    rpr = sub_node(ppr, "w:rPr")
    return ppr, rpr


# ---------------------------------------------------------------------------
# Run / paragraph / document
# ---------------------------------------------------------------------------

def render_run(run: Run, ambient_size: int) -> MarkupNode:
    """Return the ``w:r`` fragment for *run*."""
    r = MarkupNode("w:r")
    rpr = sub_node(r, "w:rPr")

    if run.font_size != ambient_size:
        rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(run.font_size)}))

    if run.bold:
        rpr.add_child(MarkupNode.empty("w:b"))
        rpr.add_child(MarkupNode.empty("w:bCs"))
    if run.italic:
        rpr.add_child(MarkupNode.empty("w:i"))
        rpr.add_child(MarkupNode.empty("w:iCs"))
    if run.underline:
        rpr.add_child(MarkupNode("w:u", {"w:val": "single"}))
    if run.strikethrough:
        rpr.add_child(MarkupNode.empty("w:strike"))

    t = sub_node(r, "w:t", text=run.text)
    if run.preserve_whitespace:
        t.set("xml:space", "preserve")
    return r


def render_blank_line(size: int) -> MarkupNode:
    """Return an empty paragraph, sized when *size* is positive."""
    p = MarkupNode("w:p")
    ppr, para_rpr = _paragraph_properties("Normal", "start")
    p.add_child(ppr)

    r = sub_node(p, "w:r")
    run_rpr = sub_node(r, "w:rPr")

    # Paragraph mark and run both carry the size.
    if size > 0:
        para_rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(size)}))
        run_rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(size)}))
    return p


def render_paragraph(paragraph: Paragraph, ambient_size: int) -> MarkupNode:
    """Return the ``w:p`` fragment for *paragraph*."""
    if paragraph.is_blank_line:
        return render_blank_line(paragraph.blank_line_size)

    p = MarkupNode("w:p")
    ppr, _ = _paragraph_properties(paragraph.style, paragraph.alignment.value)
    p.add_child(ppr)
    for run in paragraph.runs:
        p.add_child(render_run(run, ambient_size))
    return p


def section_properties() -> MarkupNode:
    """Return the single ``w:sectPr`` every document ends with."""
    sect = MarkupNode("w:sectPr")
    sect.add_child(MarkupNode.empty("w:type", {"w:val": "nextPage"}))
    sect.add_child(MarkupNode.empty("w:pgSz", {
        "w:w": str(_A4_WIDTH),
        "w:h": str(_A4_HEIGHT),
    }))
    sect.add_child(MarkupNode.empty("w:pgMar", {
        "w:top": str(_MARGIN_TOP),
        "w:right": str(_MARGIN_RIGHT),
        "w:bottom": str(_MARGIN_BOTTOM),
        "w:left": str(_MARGIN_LEFT),
        "w:header": str(_MARGIN_HEADER),
        "w:footer": str(_MARGIN_FOOTER),
        "w:gutter": str(_MARGIN_GUTTER),
    }))
    sect.add_child(MarkupNode.empty("w:pgNumType", {"w:fmt": "decimal"}))
    sect.add_child(MarkupNode.empty("w:formProt", {"w:val": "false"}))
    sect.add_child(MarkupNode.empty("w:textDirection", {"w:val": "lrTb"}))
    sect.add_child(MarkupNode.empty("w:docGrid", {
        "w:type": "default",
        "w:linePitch": "100",
        "w:charSpace": "0",
    }))
    return sect


def document_root() -> MarkupNode:
    """Return an empty ``w:document`` with its namespace declarations."""
    root = MarkupNode("w:document")
    for prefix, uri in NS.items():
        root.set(f"xmlns:{prefix}", uri)
    root.set("mc:Ignorable", IGNORABLE)
    return root


def render_document(document: Document) -> MarkupNode:
    """Return the full ``w:document`` tree for *document*."""
    root = document_root()
    body = sub_node(root, "w:body")
    for paragraph in document.paragraphs:
        body.add_child(render_paragraph(paragraph, document.ambient_font_size))
    body.add_child(section_properties())
    return root
