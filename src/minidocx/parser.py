"""Markdown front end that builds a :class:`~minidocx.model.Document`.

Uses mistune v3 in AST mode and walks the token stream, turning block
tokens into paragraphs and inline tokens into formatted runs.  Only what
the paragraph/run model can express is kept: tables are not enabled and
images become italic placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

import mistune

from minidocx.errors import InvalidArgumentError
from minidocx.model import Document, Paragraph, Run
from minidocx.style_manager import StyleManager

_BULLETS = ("•", "◦", "▪")
_INDENT = "    "


@dataclass(frozen=True)
class _Format:
    """Inline formatting inherited from enclosing tokens."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    size: int = 12

    def run(self, text: str, *, preserve: bool = False) -> Run:
        return Run(
            text,
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            strikethrough=self.strikethrough,
            preserve_whitespace=preserve,
            font_size=self.size,
        )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse Markdown text into a :class:`Document`.

    Usage::

        doc = MarkdownParser(StyleManager("business")).parse("# Title\\n\\nBody")

    *ambient_font_size* overrides the preset's body size; heading sizes
    always come from the preset.
    """

    def __init__(
        self,
        style_manager: Optional[StyleManager] = None,
        *,
        ambient_font_size: Optional[int] = None,
    ) -> None:
        self.style = style_manager or StyleManager()
        if ambient_font_size is None:
            ambient_font_size = self.style.ambient_font_size
        elif isinstance(ambient_font_size, bool) or not isinstance(ambient_font_size, int) \
                or ambient_font_size < 1:
            raise InvalidArgumentError(
                f"ambient_font_size must be a positive integer, got {ambient_font_size!r}"
            )
        self.ambient_font_size = ambient_font_size
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["strikethrough", "task_lists"],
        )

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> Document:
        """Return a :class:`Document` for *markdown_text*.

        Raises:
            InvalidArgumentError: if the text holds characters that XML
                cannot represent, such as most C0 control characters.
        """
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        doc = Document(self.ambient_font_size, style_manager=self.style)
        base = _Format(size=self.ambient_font_size)
        for paragraph in self._convert_blocks(tokens, base, depth=0):
            doc.add_paragraph(paragraph)
        return doc

    # -- block dispatch -----------------------------------------------------

    def _convert_blocks(
        self, tokens: list[dict[str, Any]], fmt: _Format, *, depth: int
    ) -> list[Paragraph]:
        paragraphs: list[Paragraph] = []
        for tok in tokens:
            handler = getattr(self, f"_handle_{tok.get('type', '')}", None)
            if handler is not None:
                paragraphs.extend(handler(tok, fmt, depth))
                continue
            raw = tok.get("raw", tok.get("text", ""))
            if isinstance(raw, str) and raw.strip():
                paragraphs.append(Paragraph().add_run(fmt.run(raw.strip())))
        return paragraphs

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict, fmt: _Format, _depth: int) -> list[Paragraph]:
        level = max(1, min(6, tok.get("attrs", {}).get("level", 1)))
        heading_fmt = replace(fmt, bold=True, size=self.style.heading_size(level))
        para = Paragraph(style=f"Heading{level}")
        for run in self._inline_runs(tok.get("children", []), heading_fmt):
            para.add_run(run)
        return [para]

    def _handle_paragraph(self, tok: dict, fmt: _Format, depth: int) -> list[Paragraph]:
        runs = self._inline_runs(tok.get("children", []), fmt)
        if not runs:
            return []
        para = Paragraph()
        if depth:
            para.add_run(fmt.run(_INDENT * depth, preserve=True))
        for run in runs:
            para.add_run(run)
        return [para]

    _handle_block_text = _handle_paragraph

    def _handle_block_code(self, tok: dict, fmt: _Format, _depth: int) -> list[Paragraph]:
        text = tok.get("raw", "")
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines = lines[:-1]
        paragraphs: list[Paragraph] = []
        for line in lines:
            para = Paragraph()
            if line:
                para.add_run(fmt.run(line, preserve=True))
            paragraphs.append(para)
        return paragraphs

    def _handle_block_quote(self, tok: dict, fmt: _Format, depth: int) -> list[Paragraph]:
        return self._convert_blocks(
            tok.get("children", []), replace(fmt, italic=True), depth=depth
        )

    def _handle_thematic_break(self, _tok: dict, _fmt: _Format, _depth: int) -> list[Paragraph]:
        return [Paragraph.blank_line()]

    def _handle_blank_line(self, _tok: dict, _fmt: _Format, _depth: int) -> list[Paragraph]:
        return []

    def _handle_block_html(self, tok: dict, fmt: _Format, _depth: int) -> list[Paragraph]:
        raw = tok.get("raw", "").strip()
        return [Paragraph().add_run(fmt.run(raw))] if raw else []

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict, fmt: _Format, depth: int) -> list[Paragraph]:
        attrs = tok.get("attrs", {})
        ordered = attrs.get("ordered", False)
        counter = attrs.get("start", 1) or 1
        paragraphs: list[Paragraph] = []
        for item in tok.get("children", []):
            if item.get("type") == "task_list_item":
                prefix = "☑ " if item.get("attrs", {}).get("checked") else "☐ "
            elif ordered:
                prefix = f"{counter}. "
                counter += 1
            else:
                prefix = f"{_BULLETS[depth % len(_BULLETS)]} "
            paragraphs.extend(self._list_item(item, fmt, depth, prefix))
        return paragraphs

    def _list_item(self, item: dict, fmt: _Format, depth: int, prefix: str) -> list[Paragraph]:
        head = Paragraph()
        head.add_run(fmt.run(_INDENT * depth + prefix, preserve=True))
        nested: list[Paragraph] = []
        for child in item.get("children", []):
            ctype = child.get("type")
            if ctype in ("block_text", "paragraph") and not nested:
                for run in self._inline_runs(child.get("children", []), fmt):
                    head.add_run(run)
            elif ctype == "list":
                nested.extend(self._handle_list(child, fmt, depth + 1))
            else:
                nested.extend(self._convert_blocks([child], fmt, depth=depth + 1))
        return [head, *nested]

    # -- inline -------------------------------------------------------------

    def _inline_runs(self, children: Any, fmt: _Format) -> list[Run]:
        if isinstance(children, str):
            return [fmt.run(children)] if children else []
        runs: list[Run] = []
        for tok in children or []:
            runs.extend(self._inline_token(tok, fmt))
        return runs

    def _inline_token(self, tok: dict, fmt: _Format) -> list[Run]:
        ttype = tok.get("type", "")
        children = tok.get("children", [])

        if ttype == "text":
            raw = tok.get("raw", "")
            return [fmt.run(raw, preserve=raw != raw.strip())] if raw else []
        if ttype == "strong":
            return self._inline_runs(children, replace(fmt, bold=True))
        if ttype == "emphasis":
            return self._inline_runs(children, replace(fmt, italic=True))
        if ttype == "strikethrough":
            return self._inline_runs(children, replace(fmt, strikethrough=True))
        if ttype == "link":
            return self._inline_runs(children, replace(fmt, underline=True))
        if ttype == "codespan":
            raw = tok.get("raw", "")
            return [fmt.run(raw, preserve=True)] if raw else []
        if ttype == "image":
            alt = _plain_text(children) or tok.get("attrs", {}).get("url", "") or "image"
            return [replace(fmt, italic=True).run(f"[Image: {alt}]")]
        if ttype in ("linebreak", "softbreak"):
            return [fmt.run(" ", preserve=True)]
        if ttype == "inline_html":
            raw = tok.get("raw", "")
            return [fmt.run(raw)] if raw else []

        text = _plain_text(children) or tok.get("raw", "")
        return [fmt.run(text)] if text else []


def _plain_text(children: Any) -> str:
    """Flatten inline tokens to their raw text."""
    if isinstance(children, str):
        return children
    parts: list[str] = []
    for child in children or []:
        if isinstance(child, dict):
            if child.get("children"):
                parts.append(_plain_text(child["children"]))
            else:
                parts.append(child.get("raw", ""))
    return "".join(parts)
