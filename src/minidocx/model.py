"""Paragraph / run document model.

A :class:`Document` owns an ordered list of :class:`Paragraph` objects, each
of which owns an ordered list of :class:`Run` objects.  The model is built
by appending and is turned into markup by :mod:`minidocx.renderer`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, TYPE_CHECKING, Optional

from minidocx import renderer
from minidocx.errors import InvalidArgumentError
from minidocx.markup import MarkupNode, invalid_char, print_node, serialize
from minidocx.packager import Archiver, PackageAssembler
from minidocx.parts import CoreProperties, build_parts

if TYPE_CHECKING:
    from minidocx.style_manager import StyleManager

logger = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 12


def _check_size(value: object, what: str, *, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{what} must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        raise InvalidArgumentError(f"{what} must be {bound}, got {value}")


def _check_run(value: object) -> None:
    if not isinstance(value, Run):
        raise InvalidArgumentError(f"expected a Run, got {type(value).__name__}")


class Alignment(Enum):
    """Paragraph justification; the value is the ``w:jc`` token."""

    START = "start"
    CENTER = "center"
    END = "end"
    JUSTIFIED = "both"


@dataclass
class Run:
    """A span of text sharing one set of character properties."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    preserve_whitespace: bool = False
    font_size: int = DEFAULT_FONT_SIZE

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise InvalidArgumentError(f"run text must be a string, got {type(self.text).__name__}")
        bad = invalid_char(self.text)
        if bad is not None:
            raise InvalidArgumentError(f"run text contains U+{ord(bad):04X}, which XML cannot represent")
        _check_size(self.font_size, "font_size")


@dataclass
class Paragraph:
    """A block of runs with paragraph-level properties.

    When ``is_blank_line`` is set the paragraph renders as an empty line and
    its runs are ignored.
    """

    runs: list[Run] = field(default_factory=list)
    is_blank_line: bool = False
    blank_line_size: int = 0
    alignment: Alignment = Alignment.START
    style: str = "Normal"

    def __post_init__(self) -> None:
        if not isinstance(self.runs, list):
            raise InvalidArgumentError(f"runs must be a list, got {type(self.runs).__name__}")
        for run in self.runs:
            _check_run(run)
        _check_size(self.blank_line_size, "blank_line_size", allow_zero=True)
        if not isinstance(self.alignment, Alignment):
            raise InvalidArgumentError(f"alignment must be an Alignment, got {self.alignment!r}")

    # -- constructors -------------------------------------------------------

    @classmethod
    def blank_line(cls, size: int = 0) -> Paragraph:
        return cls(is_blank_line=True, blank_line_size=size)

    @classmethod
    def heading(cls, text: str, level: int = 1, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        """Bold paragraph tied to the ``Heading{level}`` style."""
        if not 1 <= level <= 6:
            raise InvalidArgumentError(f"heading level must be 1..6, got {level}")
        para = cls(style=f"Heading{level}")
        return para.add_bold_text(text, font_size=font_size)

    # -- builders -----------------------------------------------------------

    def add_run(self, run: Run) -> Paragraph:
        _check_run(run)
        self.runs.append(run)
        return self

    add_formatted_text = add_run

    def add_plain_text(self, text: str, *, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        return self.add_run(Run(text, font_size=font_size))

    def add_space(self, count: int = 1, *, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        """Append *count* literal spaces that survive serialization."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError(f"space count must be a positive integer, got {count!r}")
        return self.add_run(Run(" " * count, preserve_whitespace=True, font_size=font_size))

    def add_bold_text(self, text: str, *, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        return self.add_run(Run(text, bold=True, font_size=font_size))

    def add_italic_text(self, text: str, *, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        return self.add_run(Run(text, italic=True, font_size=font_size))

    def add_underlined_text(self, text: str, *, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        return self.add_run(Run(text, underline=True, font_size=font_size))

    def add_struckthrough_text(self, text: str, *, font_size: int = DEFAULT_FONT_SIZE) -> Paragraph:
        return self.add_run(Run(text, strikethrough=True, font_size=font_size))

    @property
    def plain_text(self) -> str:
        if self.is_blank_line:
            return ""
        return "".join(run.text for run in self.runs)


class Document:
    """Aggregation root: an ordered list of paragraphs plus page settings.

    Usage::

        doc = Document()
        doc.add_paragraph(Paragraph().add_plain_text("hello").add_space()
                          .add_italic_text("world"))
        doc.add_blank_line(2)
        doc.save("hello.docx")
    """

    def __init__(
        self,
        ambient_font_size: int = DEFAULT_FONT_SIZE,
        *,
        properties: Optional[CoreProperties] = None,
        style_manager: Optional[StyleManager] = None,
    ) -> None:
        _check_size(ambient_font_size, "ambient_font_size")
        self.ambient_font_size = ambient_font_size
        self.properties = properties or CoreProperties()
        self.style_manager = style_manager
        self.paragraphs: list[Paragraph] = []

    # -- building -----------------------------------------------------------

    def add_paragraph(self, paragraph: Paragraph) -> None:
        if not isinstance(paragraph, Paragraph):
            raise InvalidArgumentError(f"expected a Paragraph, got {type(paragraph).__name__}")
        self.paragraphs.append(paragraph)

    def add_blank_line(self, count: int = 1, size: int = 0) -> None:
        """Append *count* blank-line paragraphs of *size* points (0 = ambient)."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError(f"blank line count must be a positive integer, got {count!r}")
        _check_size(size, "blank line size", allow_zero=True)
        for _ in range(count):
            self.paragraphs.append(Paragraph.blank_line(size))

    # -- output -------------------------------------------------------------

    def render(self) -> MarkupNode:
        """Return the ``w:document`` tree for ``word/document.xml``."""
        return renderer.render_document(self)

    def serialize(self) -> str:
        return serialize(self.render())

    def print(self, file: Optional[IO[str]] = None) -> None:
        print_node(self.render(), file=file)

    def save(
        self,
        filename: str | Path,
        *,
        archiver: Optional[Archiver] = None,
        staging_root: Optional[str | Path] = None,
    ) -> Path:
        """Write the document as a ``.docx`` container at *filename*.

        Raises:
            PackagingError: if staging or archiving fails. The staging
                directory is removed either way.
        """
        style = self.style_manager.style if self.style_manager else None
        parts = build_parts(
            style=style,
            properties=self.properties,
            ambient_size=self.ambient_font_size,
        )
        assembler = PackageAssembler(archiver=archiver, staging_root=staging_root)
        output = assembler.assemble(self.render(), parts, filename)
        logger.info("Saved as %s", output)
        return output

    def __len__(self) -> int:
        return len(self.paragraphs)
