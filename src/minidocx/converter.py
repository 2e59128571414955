"""High-level Markdown-to-DOCX conversion orchestrator.

Ties together the Markdown parser, the style presets and the package
assembler into a single public API for converting Markdown text or files
to ``.docx`` output.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

from minidocx.model import Document
from minidocx.packager import Archiver
from minidocx.parser import MarkdownParser
from minidocx.parts import CoreProperties
from minidocx.style_manager import StyleManager

logger = logging.getLogger(__name__)


class Converter:
    """Convert Markdown content to DOCX format.

    Usage::

        converter = Converter(style_preset="default")
        converter.convert_file("input.md", "output.docx")

        # or from string
        docx_bytes = converter.convert_text("# Hello")

    *ambient_font_size* overrides the preset's body size, *properties* is
    written to ``docProps/core.xml`` and *staging_root* is where the
    temporary package tree is laid out.
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(
        self,
        style_preset: str = "default",
        archiver: Optional[Archiver] = None,
        *,
        ambient_font_size: Optional[int] = None,
        properties: Optional[CoreProperties] = None,
        staging_root: Optional[str | Path] = None,
    ) -> None:
        self.style_manager = StyleManager(style_preset)
        self.parser = MarkdownParser(self.style_manager, ambient_font_size=ambient_font_size)
        self.archiver = archiver
        self.properties = properties
        self.staging_root = staging_root

    def build(self, markdown_text: str) -> Document:
        """Parse *markdown_text* into a :class:`Document`."""
        doc = self.parser.parse(markdown_text)
        if self.properties is not None:
            doc.properties = self.properties
        return doc

    def convert_text(self, markdown_text: str) -> bytes:
        """Convert Markdown text to DOCX bytes.

        Args:
            markdown_text: Markdown source string.

        Returns:
            DOCX file content as bytes.
        """
        doc = self.build(markdown_text)
        with tempfile.TemporaryDirectory(prefix="minidocx-out-") as tmp:
            target = Path(tmp) / "document.docx"
            doc.save(target, archiver=self.archiver, staging_root=self.staging_root)
            return target.read_bytes()

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> Path:
        """Read a Markdown file and write the DOCX output.

        Args:
            input_path: Path to the input ``.md`` file.
            output_path: Path for the output ``.docx`` file.
            encoding: Text encoding of the source file.

        Returns:
            The path of the written container.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        md_text = input_path.read_text(encoding=encoding)
        doc = self.build(md_text)
        logger.debug("Parsed %s into %d paragraphs", input_path, len(doc))
        return doc.save(output_path, archiver=self.archiver, staging_root=self.staging_root)
