"""Auxiliary package parts of a ``.docx`` container.

Every function here returns the root :class:`~minidocx.markup.MarkupNode`
of one fixed part.  None of them depends on document content; the only
inputs are the style preset, the core metadata and the save timestamp.
The parts reference each other by fixed relationship IDs and paths, so the
IDs below must stay in sync with :data:`PART_PATHS`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from minidocx import __version__
from minidocx.markup import MarkupNode, sub_node
from minidocx.renderer import half_points
from minidocx.style_manager import StyleManager, StylePreset, preset_fonts

# ---------------------------------------------------------------------------
# Namespaces, relationship and content types
# ---------------------------------------------------------------------------

CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"
W14_NS = "http://schemas.microsoft.com/office/word/2010/wordml"
EXT_PROPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
VT_NS = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"
CORE_NS = {
    "cp": "http://schemas.openxmlformats.org/package/2006/metadata/core-properties",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "dcmitype": "http://purl.org/dc/dcmitype/",
    "xsi": "http://www.w3.org/2001/XMLSchema-instance",
}

_OFFICE_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_PACKAGE_REL = "http://schemas.openxmlformats.org/package/2006/relationships"

REL_TYPES = {
    "core": f"{_PACKAGE_REL}/metadata/core-properties",
    "app": f"{_OFFICE_REL}/extended-properties",
    "document": f"{_OFFICE_REL}/officeDocument",
    "styles": f"{_OFFICE_REL}/styles",
    "fontTable": f"{_OFFICE_REL}/fontTable",
    "settings": f"{_OFFICE_REL}/settings",
    "theme": f"{_OFFICE_REL}/theme",
}

_WML = "application/vnd.openxmlformats-officedocument.wordprocessingml"

DEFAULT_CONTENT_TYPES = (
    ("xml", "application/xml"),
    ("rels", "application/vnd.openxmlformats-package.relationships+xml"),
    ("png", "image/png"),
    ("jpeg", "image/jpeg"),
)

OVERRIDE_CONTENT_TYPES = (
    ("/_rels/.rels", "application/vnd.openxmlformats-package.relationships+xml"),
    ("/docProps/app.xml", "application/vnd.openxmlformats-officedocument.extended-properties+xml"),
    ("/docProps/core.xml", "application/vnd.openxmlformats-package.core-properties+xml"),
    ("/word/_rels/document.xml.rels", "application/vnd.openxmlformats-package.relationships+xml"),
    ("/word/document.xml", f"{_WML}.document.main+xml"),
    ("/word/styles.xml", f"{_WML}.styles+xml"),
    ("/word/fontTable.xml", f"{_WML}.fontTable+xml"),
    ("/word/settings.xml", f"{_WML}.settings+xml"),
    ("/word/theme/theme1.xml", "application/vnd.openxmlformats-officedocument.theme+xml"),
)

DOCUMENT_PART = "word/document.xml"

PART_PATHS = {
    "content_types": "[Content_Types].xml",
    "package_relationships": "_rels/.rels",
    "app_properties": "docProps/app.xml",
    "core_properties": "docProps/core.xml",
    "font_table": "word/fontTable.xml",
    "settings": "word/settings.xml",
    "styles": "word/styles.xml",
    "document_relationships": "word/_rels/document.xml.rels",
    "theme": "word/theme/theme1.xml",
}


@dataclass
class CoreProperties:
    """Metadata written to ``docProps/core.xml``."""

    title: str = ""
    subject: str = ""
    creator: str = ""
    description: str = ""
    language: str = "en-US"
    revision: int = 1


def _w3cdtf(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def _relationships(entries: list[tuple[str, str, str]]) -> MarkupNode:
    root = MarkupNode("Relationships", {"xmlns": REL_NS})
    for rel_id, rel_type, target in entries:
        root.add_child(MarkupNode.empty("Relationship", {
            "Id": rel_id,
            "Type": REL_TYPES[rel_type],
            "Target": target,
        }))
    return root


# ---------------------------------------------------------------------------
# Package-level parts
# ---------------------------------------------------------------------------

def content_types() -> MarkupNode:
    """``[Content_Types].xml``."""
    root = MarkupNode("Types", {"xmlns": CT_NS})
    for ext, ctype in DEFAULT_CONTENT_TYPES:
        root.add_child(MarkupNode.empty("Default", {"Extension": ext, "ContentType": ctype}))
    for part, ctype in OVERRIDE_CONTENT_TYPES:
        root.add_child(MarkupNode.empty("Override", {"PartName": part, "ContentType": ctype}))
    return root


def package_relationships() -> MarkupNode:
    """``_rels/.rels``: metadata parts and the main document."""
    return _relationships([
        ("rId1", "core", PART_PATHS["core_properties"]),
        ("rId2", "app", PART_PATHS["app_properties"]),
        ("rId3", "document", DOCUMENT_PART),
    ])


def app_properties() -> MarkupNode:
    """``docProps/app.xml`` with placeholder statistics."""
    root = MarkupNode("Properties", {"xmlns": EXT_PROPS_NS, "xmlns:vt": VT_NS})
    sub_node(root, "Template", text="")
    sub_node(root, "TotalTime", text="0")
    sub_node(root, "Application", text=f"minidocx/{__version__}")
    sub_node(root, "Pages", text="1")
    sub_node(root, "Words", text="0")
    sub_node(root, "Characters", text="0")
    sub_node(root, "CharactersWithSpaces", text="0")
    sub_node(root, "Paragraphs", text="0")
    return root


def core_properties(
    properties: Optional[CoreProperties] = None,
    now: Optional[datetime] = None,
) -> MarkupNode:
    """``docProps/core.xml`` stamped with *now* as creation and modification time."""
    props = properties or CoreProperties()
    stamp = _w3cdtf(now or datetime.now(timezone.utc))

    root = MarkupNode("cp:coreProperties")
    for prefix, uri in CORE_NS.items():
        root.set(f"xmlns:{prefix}", uri)
    sub_node(root, "dcterms:created", {"xsi:type": "dcterms:W3CDTF"}, text=stamp)
    sub_node(root, "dc:creator", text=props.creator)
    sub_node(root, "dc:description", text=props.description)
    sub_node(root, "dc:language", text=props.language)
    sub_node(root, "cp:lastModifiedBy", text=props.creator)
    sub_node(root, "dcterms:modified", {"xsi:type": "dcterms:W3CDTF"}, text=stamp)
    sub_node(root, "cp:revision", text=str(props.revision))
    sub_node(root, "dc:subject", text=props.subject)
    sub_node(root, "dc:title", text=props.title)
    return root


# ---------------------------------------------------------------------------
# word/ parts
# ---------------------------------------------------------------------------

def document_relationships() -> MarkupNode:
    """``word/_rels/document.xml.rels``: paths relative to ``word/``."""
    return _relationships([
        ("rId1", "styles", "styles.xml"),
        ("rId2", "fontTable", "fontTable.xml"),
        ("rId3", "settings", "settings.xml"),
        ("rId4", "theme", "theme/theme1.xml"),
    ])


def font_table(style: Optional[StylePreset] = None) -> MarkupNode:
    """``word/fontTable.xml``."""
    preset = style or StyleManager().style
    root = MarkupNode("w:fonts", {"xmlns:w": W_NS, "xmlns:r": R_NS})
    for font in preset_fonts(preset):
        f = sub_node(root, "w:font", {"w:name": font.name})
        f.add_child(MarkupNode.empty("w:charset", {"w:val": font.charset}))
        f.add_child(MarkupNode.empty("w:family", {"w:val": font.family}))
        f.add_child(MarkupNode.empty("w:pitch", {"w:val": font.pitch}))
    return root


def settings() -> MarkupNode:
    """``word/settings.xml`` with compatibility flags."""
    root = MarkupNode("w:settings", {"xmlns:w": W_NS})
    root.add_child(MarkupNode.empty("w:zoom", {"w:percent": "100"}))
    root.add_child(MarkupNode.empty("w:defaultTabStop", {"w:val": "709"}))
    root.add_child(MarkupNode.empty("w:autoHyphenation", {"w:val": "true"}))
    root.add_child(MarkupNode.empty("w:characterSpacingControl", {"w:val": "doNotCompress"}))
    compat = sub_node(root, "w:compat")
    compat.add_child(MarkupNode.empty("w:doNotExpandShiftReturn"))
    compat.add_child(MarkupNode.empty("w:compatSetting", {
        "w:name": "compatibilityMode",
        "w:uri": "http://schemas.microsoft.com/office/word",
        "w:val": "15",
    }))
    root.add_child(MarkupNode.empty("w:themeFontLang", {
        "w:val": "en-US",
        "w:eastAsia": "",
        "w:bidi": "",
    }))
    return root


def _fonts_node(name: str) -> MarkupNode:
    return MarkupNode.empty("w:rFonts", {
        "w:ascii": name,
        "w:hAnsi": name,
        "w:eastAsia": name,
        "w:cs": name,
    })


def _paragraph_style(
    parent: MarkupNode,
    style_id: str,
    name: str,
    *,
    based_on: Optional[str] = None,
    next_style: Optional[str] = None,
    default: bool = False,
) -> tuple[MarkupNode, MarkupNode, MarkupNode]:
    """Append a paragraph ``w:style`` and return it with its pPr and rPr."""
    attrs = {"w:type": "paragraph", "w:styleId": style_id}
    if default:
        attrs["w:default"] = "1"
    style = sub_node(parent, "w:style", attrs)
    style.add_child(MarkupNode.empty("w:name", {"w:val": name}))
    if based_on:
        style.add_child(MarkupNode.empty("w:basedOn", {"w:val": based_on}))
    if next_style:
        style.add_child(MarkupNode.empty("w:next", {"w:val": next_style}))
    style.add_child(MarkupNode.empty("w:qFormat"))
    ppr = sub_node(style, "w:pPr")
    rpr = sub_node(style, "w:rPr")
    return style, ppr, rpr


def styles(style: Optional[StylePreset] = None, ambient_size: Optional[int] = None) -> MarkupNode:
    """``word/styles.xml``.

    Normal is the default paragraph style.  Heading, BodyText, Caption and
    Index derive from it, List derives from BodyText and Heading1..Heading6
    derive from Heading.
    """
    preset = style or StyleManager().style
    size = ambient_size or preset.ambient_size
    body_font = preset.body_font.name
    heading_font = preset.heading_font.name

    root = MarkupNode("w:styles", {
        "xmlns:w": W_NS,
        "xmlns:w14": W14_NS,
        "xmlns:mc": MC_NS,
        "mc:Ignorable": "w14",
    })

    # ---- docDefaults ----
    defaults = sub_node(root, "w:docDefaults")
    rpr_default = sub_node(sub_node(defaults, "w:rPrDefault"), "w:rPr")
    rpr_default.add_child(_fonts_node(body_font))
    rpr_default.add_child(MarkupNode.empty("w:kern", {"w:val": "2"}))
    rpr_default.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(size)}))
    rpr_default.add_child(MarkupNode.empty("w:szCs", {"w:val": half_points(size)}))
    rpr_default.add_child(MarkupNode.empty("w:lang", {
        "w:val": "en-US",
        "w:eastAsia": "zh-CN",
        "w:bidi": "hi-IN",
    }))
    ppr_default = sub_node(sub_node(defaults, "w:pPrDefault"), "w:pPr")
    ppr_default.add_child(MarkupNode.empty("w:suppressAutoHyphens", {"w:val": "true"}))

    # ---- Normal ----
    _, ppr, rpr = _paragraph_style(root, "Normal", "Normal", default=True)
    ppr.add_child(MarkupNode.empty("w:widowControl"))
    ppr.add_child(MarkupNode.empty("w:bidi", {"w:val": "0"}))
    ppr.add_child(MarkupNode.empty("w:jc", {"w:val": "start"}))
    rpr.add_child(_fonts_node(body_font))
    rpr.add_child(MarkupNode.empty("w:color", {"w:val": "auto"}))
    rpr.add_child(MarkupNode.empty("w:kern", {"w:val": "2"}))
    rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(size)}))
    rpr.add_child(MarkupNode.empty("w:szCs", {"w:val": half_points(size)}))

    # ---- Heading ----
    _, ppr, rpr = _paragraph_style(root, "Heading", "Heading", based_on="Normal", next_style="BodyText")
    ppr.add_child(MarkupNode.empty("w:keepNext"))
    ppr.add_child(MarkupNode.empty("w:spacing", {"w:before": "240", "w:after": "120"}))
    rpr.add_child(_fonts_node(heading_font))
    rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(size + 2)}))
    rpr.add_child(MarkupNode.empty("w:szCs", {"w:val": half_points(size + 2)}))

    # ---- Body Text ----
    _, ppr, _ = _paragraph_style(root, "BodyText", "Body Text", based_on="Normal")
    ppr.add_child(MarkupNode.empty("w:spacing", {
        "w:before": "0",
        "w:after": str(preset.body_space_after),
        "w:line": str(preset.body_line_spacing),
        "w:lineRule": "auto",
    }))

    # ---- List ----
    _, _, rpr = _paragraph_style(root, "List", "List", based_on="BodyText")
    rpr.add_child(_fonts_node(body_font))

    # ---- Caption ----
    _, ppr, rpr = _paragraph_style(root, "Caption", "Caption", based_on="Normal")
    ppr.add_child(MarkupNode.empty("w:suppressLineNumbers"))
    ppr.add_child(MarkupNode.empty("w:spacing", {"w:before": "120", "w:after": "120"}))
    rpr.add_child(MarkupNode.empty("w:i"))
    rpr.add_child(MarkupNode.empty("w:iCs"))
    rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(size)}))
    rpr.add_child(MarkupNode.empty("w:szCs", {"w:val": half_points(size)}))

    # ---- Index ----
    _, ppr, _ = _paragraph_style(root, "Index", "Index", based_on="Normal")
    ppr.add_child(MarkupNode.empty("w:suppressLineNumbers"))

    # ---- Heading 1..6 ----
    for level in range(1, 7):
        heading_size = preset.heading_sizes.get(level, size)
        _, ppr, rpr = _paragraph_style(
            root, f"Heading{level}", f"heading {level}",
            based_on="Heading", next_style="BodyText",
        )
        ppr.add_child(MarkupNode.empty("w:outlineLvl", {"w:val": str(level - 1)}))
        rpr.add_child(MarkupNode.empty("w:b"))
        rpr.add_child(MarkupNode.empty("w:bCs"))
        rpr.add_child(MarkupNode.empty("w:sz", {"w:val": half_points(heading_size)}))
        rpr.add_child(MarkupNode.empty("w:szCs", {"w:val": half_points(heading_size)}))

    return root


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

_THEME_COLORS = (
    ("dk2", "44546A"),
    ("lt2", "E7E6E6"),
    ("accent1", "4472C4"),
    ("accent2", "ED7D31"),
    ("accent3", "A5A5A5"),
    ("accent4", "FFC000"),
    ("accent5", "5B9BD5"),
    ("accent6", "70AD47"),
    ("hlink", "0563C1"),
    ("folHlink", "954F72"),
)


def _theme_font(parent: MarkupNode, tag: str, latin: str) -> None:
    group = sub_node(parent, tag)
    group.add_child(MarkupNode.empty("a:latin", {"typeface": latin}))
    group.add_child(MarkupNode.empty("a:ea", {"typeface": ""}))
    group.add_child(MarkupNode.empty("a:cs", {"typeface": ""}))


def _phclr_fill(parent: MarkupNode) -> None:
    fill = sub_node(parent, "a:solidFill")
    fill.add_child(MarkupNode.empty("a:schemeClr", {"val": "phClr"}))


def theme() -> MarkupNode:
    """``word/theme/theme1.xml``: colour, font and format schemes."""
    root = MarkupNode("a:theme", {"xmlns:a": A_NS, "name": "Office Theme"})
    elements = sub_node(root, "a:themeElements")

    # ---- colour scheme ----
    clr = sub_node(elements, "a:clrScheme", {"name": "Office"})
    sub_node(clr, "a:dk1").add_child(
        MarkupNode.empty("a:sysClr", {"val": "windowText", "lastClr": "000000"})
    )
    sub_node(clr, "a:lt1").add_child(
        MarkupNode.empty("a:sysClr", {"val": "window", "lastClr": "FFFFFF"})
    )
    for tag, rgb in _THEME_COLORS:
        sub_node(clr, f"a:{tag}").add_child(MarkupNode.empty("a:srgbClr", {"val": rgb}))

    # ---- font scheme ----
    fonts = sub_node(elements, "a:fontScheme", {"name": "Office"})
    _theme_font(fonts, "a:majorFont", "Calibri Light")
    _theme_font(fonts, "a:minorFont", "Calibri")

    # ---- format scheme (three entries per list) ----
    fmt = sub_node(elements, "a:fmtScheme", {"name": "Office"})
    fills = sub_node(fmt, "a:fillStyleLst")
    for _ in range(3):
        _phclr_fill(fills)
    lines = sub_node(fmt, "a:lnStyleLst")
    for width in ("6350", "12700", "19050"):
        ln = sub_node(lines, "a:ln", {"w": width, "cap": "flat", "cmpd": "sng", "algn": "ctr"})
        _phclr_fill(ln)
        ln.add_child(MarkupNode.empty("a:prstDash", {"val": "solid"}))
        ln.add_child(MarkupNode.empty("a:miter", {"lim": "800000"}))
    effects = sub_node(fmt, "a:effectStyleLst")
    for _ in range(3):
        sub_node(sub_node(effects, "a:effectStyle"), "a:effectLst")
    bg_fills = sub_node(fmt, "a:bgFillStyleLst")
    for _ in range(3):
        _phclr_fill(bg_fills)

    root.add_child(MarkupNode.empty("a:objectDefaults"))
    root.add_child(MarkupNode.empty("a:extraClrSchemeLst"))
    return root


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

def build_parts(
    style: Optional[StylePreset] = None,
    properties: Optional[CoreProperties] = None,
    ambient_size: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict[str, MarkupNode]:
    """Return every auxiliary part keyed by its path inside the container."""
    return {
        PART_PATHS["content_types"]: content_types(),
        PART_PATHS["package_relationships"]: package_relationships(),
        PART_PATHS["app_properties"]: app_properties(),
        PART_PATHS["core_properties"]: core_properties(properties, now),
        PART_PATHS["font_table"]: font_table(style),
        PART_PATHS["settings"]: settings(),
        PART_PATHS["styles"]: styles(style, ambient_size),
        PART_PATHS["document_relationships"]: document_relationships(),
        PART_PATHS["theme"]: theme(),
    }
