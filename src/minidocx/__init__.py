"""minidocx - build Office Open XML word-processing documents."""

__version__ = "0.1.0"

from minidocx.errors import (  # noqa: E402
    FormatError,
    InvalidArgumentError,
    MinidocxError,
    PackagingError,
    StagingError,
)
from minidocx.markup import MarkupNode  # noqa: E402
from minidocx.model import Alignment, Document, Paragraph, Run  # noqa: E402
from minidocx.packager import CommandArchiver, PackageAssembler, ZipArchiver  # noqa: E402
from minidocx.parts import CoreProperties  # noqa: E402

__all__ = [
    "Alignment",
    "CommandArchiver",
    "CoreProperties",
    "Document",
    "FormatError",
    "InvalidArgumentError",
    "MarkupNode",
    "MinidocxError",
    "PackageAssembler",
    "PackagingError",
    "Paragraph",
    "Run",
    "StagingError",
    "ZipArchiver",
    "__version__",
]
