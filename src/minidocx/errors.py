"""Exception hierarchy for minidocx."""

from __future__ import annotations


class MinidocxError(Exception):
    """Base class for every error raised by minidocx."""


class FormatError(MinidocxError, ValueError):
    """A markup node was asked to take a structurally invalid shape."""


class InvalidArgumentError(MinidocxError, ValueError):
    """A model operation received an out-of-range or mistyped argument."""


class PackagingError(MinidocxError):
    """The document container could not be produced."""


class StagingError(PackagingError, OSError):
    """Writing or removing the staged package parts failed."""
