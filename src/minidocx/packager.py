"""Package assembly: stage the parts on disk and fold them into a container.

:class:`PackageAssembler` writes ``word/document.xml`` and the auxiliary
parts into a fresh staging directory laid out like the container, hands the
directory to an :class:`Archiver`, and removes the staging tree afterwards
whether or not archiving succeeded.

Each call stages into its own ``tempfile.mkdtemp`` directory, so separate
documents can be saved concurrently.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional, Protocol, Sequence

from minidocx import markup
from minidocx.errors import PackagingError, StagingError
from minidocx.markup import MarkupNode
from minidocx.parts import DOCUMENT_PART, PART_PATHS

logger = logging.getLogger(__name__)

# Directories created below the staging root, parents first.
SKELETON_DIRS = ("_rels", "docProps", "word", "word/_rels", "word/theme")

STAGED_PATHS = tuple(sorted((*PART_PATHS.values(), DOCUMENT_PART)))

# Must be the first entry of the archive.
_FIRST_ENTRY = PART_PATHS["content_types"]


# ---------------------------------------------------------------------------
# Archivers
# ---------------------------------------------------------------------------

class Archiver(Protocol):
    """Folds a staging directory into a single container file."""

    def archive(self, staging_dir: Path, output_path: Path) -> None:
        """Write *output_path*; raise :class:`PackagingError` on failure.

        A file already at *output_path* must survive a failed call.
        """


@contextmanager
def _scratch_output(output_path: Path) -> Iterator[Path]:
    """Yield a fresh path beside *output_path* and move it over on success.

    The scratch file sits in a private directory next to the output so the
    final ``os.replace`` stays on one filesystem.  If the body raises, the
    scratch directory is removed and an existing *output_path* is untouched.
    """
    try:
        scratch_dir = Path(tempfile.mkdtemp(prefix=".minidocx-", dir=output_path.parent))
    except OSError as exc:
        raise PackagingError(f"cannot write {output_path}: {exc}") from exc
    scratch = scratch_dir / output_path.name
    try:
        yield scratch
        try:
            os.replace(scratch, output_path)
        except OSError as exc:
            raise PackagingError(f"cannot write {output_path}: {exc}") from exc
    finally:
        shutil.rmtree(scratch_dir, ignore_errors=True)


class ZipArchiver:
    """Archive with :mod:`zipfile`, keeping every staged relative path."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.compression = compression

    def archive(self, staging_dir: Path, output_path: Path) -> None:
        files = sorted(
            p for p in staging_dir.rglob("*") if p.is_file()
        )
        names = [p.relative_to(staging_dir).as_posix() for p in files]
        ordered = sorted(zip(names, files), key=lambda item: item[0] != _FIRST_ENTRY)
        with _scratch_output(output_path) as scratch:
            try:
                with zipfile.ZipFile(scratch, "w", self.compression) as zf:
                    for arcname, path in ordered:
                        zf.write(path, arcname)
            except OSError as exc:
                raise PackagingError(f"cannot write {output_path}: {exc}") from exc
        logger.debug("Archived %d parts into %s", len(ordered), output_path)


class CommandArchiver:
    """Archive by running an external tool inside the staging directory.

    The output path is appended to *command*, followed by ``.``.  With the
    default ``zip -r -X -q`` this is the classic ``cd staging && zip -r out .``.
    """

    def __init__(self, command: Sequence[str] = ("zip", "-r", "-X", "-q")) -> None:
        self.command = tuple(command)

    def archive(self, staging_dir: Path, output_path: Path) -> None:
        with _scratch_output(output_path) as scratch:
            args = [*self.command, str(scratch.resolve()), "."]
            logger.debug("Running %s in %s", " ".join(args), staging_dir)
            try:
                result = subprocess.run(
                    args, cwd=staging_dir, capture_output=True, text=True,
                )
            except OSError as exc:
                raise PackagingError(f"cannot run archiver {self.command[0]!r}: {exc}") from exc
            if result.returncode != 0:
                detail = (result.stderr or result.stdout).strip()
                raise PackagingError(
                    f"archiver {self.command[0]!r} exited with status {result.returncode}"
                    + (f": {detail}" if detail else "")
                )


# ---------------------------------------------------------------------------
# PackageAssembler
# ---------------------------------------------------------------------------

class PackageAssembler:
    """Stage, archive and clean up one ``.docx`` container.

    Usage::

        assembler = PackageAssembler()
        assembler.assemble(document.render(), build_parts(), "out.docx")
    """

    def __init__(
        self,
        archiver: Optional[Archiver] = None,
        staging_root: Optional[str | Path] = None,
    ) -> None:
        self.archiver: Archiver = archiver or ZipArchiver()
        self.staging_root = Path(staging_root) if staging_root is not None else None

    # ======================================================================
    # Public API
    # ======================================================================

    def assemble(
        self,
        document_part: MarkupNode,
        parts: Mapping[str, MarkupNode],
        output_path: str | Path,
    ) -> Path:
        """Write the container to *output_path* and return its path.

        Raises:
            StagingError: if the staging tree cannot be written or removed.
            PackagingError: if the archiver fails.
        """
        output = Path(output_path)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StagingError(f"cannot create {output.parent}: {exc}") from exc

        staging = self._create_staging()
        try:
            self._stage(staging, document_part, parts)
            self.archiver.archive(staging, output)
        except BaseException:
            self._discard_staging(staging)
            raise
        self._remove_staging(staging)
        return output

    # ======================================================================
    # Staging
    # ======================================================================

    def _create_staging(self) -> Path:
        try:
            if self.staging_root is not None:
                self.staging_root.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix="minidocx-", dir=self.staging_root))
        except OSError as exc:
            raise StagingError(f"cannot create staging directory: {exc}") from exc
        try:
            for rel in SKELETON_DIRS:
                (staging / rel).mkdir()
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            raise StagingError(f"cannot lay out staging directory {staging}: {exc}") from exc
        logger.debug("Staging package in %s", staging)
        return staging

    def _stage(
        self,
        staging: Path,
        document_part: MarkupNode,
        parts: Mapping[str, MarkupNode],
    ) -> None:
        entries = {DOCUMENT_PART: document_part, **parts}
        for rel, part in entries.items():
            target = staging / rel
            try:
                markup.write(part, target)
            except (OSError, UnicodeEncodeError) as exc:
                raise StagingError(f"cannot write {rel}: {exc}") from exc
            logger.debug("Staged %s", rel)

    def _remove_staging(self, staging: Path) -> None:
        """Delete files, then directories innermost first."""
        try:
            for dirpath, dirnames, filenames in os.walk(staging, topdown=False):
                for name in filenames:
                    os.remove(os.path.join(dirpath, name))
                for name in dirnames:
                    os.rmdir(os.path.join(dirpath, name))
            os.rmdir(staging)
        except OSError as exc:
            raise StagingError(f"cannot remove staging directory {staging}: {exc}") from exc
        logger.debug("Removed staging directory %s", staging)

    def _discard_staging(self, staging: Path) -> None:
        """Remove *staging* after a failure without hiding that failure."""
        try:
            self._remove_staging(staging)
        except StagingError as exc:
            logger.warning("Leaving staging directory behind: %s", exc)
