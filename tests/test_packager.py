"""Tests for staging and archiving the container."""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path

import pytest

from minidocx import packager
from minidocx.errors import PackagingError, StagingError
from minidocx.markup import XML_DECLARATION
from minidocx.model import Document, Paragraph
from minidocx.packager import (
    STAGED_PATHS,
    CommandArchiver,
    PackageAssembler,
    ZipArchiver,
)
from minidocx.parts import build_parts


class RecordingArchiver:
    """Captures the staged tree instead of archiving it."""

    def __init__(self):
        self.files: dict[str, str] = {}
        self.staging_dir: Path | None = None

    def archive(self, staging_dir: Path, output_path: Path) -> None:
        self.staging_dir = staging_dir
        for path in staging_dir.rglob("*"):
            if path.is_file():
                rel = path.relative_to(staging_dir).as_posix()
                self.files[rel] = path.read_text(encoding="utf-8")
        output_path.write_bytes(b"recorded")


class FailingArchiver:

    def archive(self, staging_dir: Path, output_path: Path) -> None:
        raise PackagingError("archiver exploded")


def sample_document() -> Document:
    doc = Document()
    doc.add_paragraph(
        Paragraph().add_plain_text("hello world").add_space().add_italic_text("this is italic")
    )
    doc.add_blank_line()
    return doc


def fail_on_third_write(monkeypatch) -> None:
    """Make ``ZipFile.write`` fail part-way through an archive."""
    real_write = zipfile.ZipFile.write
    calls = []

    def write(self, *args, **kwargs):
        calls.append(args)
        if len(calls) == 3:
            raise OSError(28, "No space left on device")
        return real_write(self, *args, **kwargs)

    monkeypatch.setattr(zipfile.ZipFile, "write", write)


# ---------------------------------------------------------------------------
# PackageAssembler
# ---------------------------------------------------------------------------

class TestPackageAssembler:

    def test_stages_every_part(self, tmp_path):
        recorder = RecordingArchiver()
        doc = sample_document()
        out = PackageAssembler(archiver=recorder).assemble(
            doc.render(), build_parts(), tmp_path / "out.docx"
        )
        assert out == tmp_path / "out.docx"
        assert tuple(sorted(recorder.files)) == STAGED_PATHS
        assert len(STAGED_PATHS) == 10

    def test_staged_parts_have_declaration(self, tmp_path):
        recorder = RecordingArchiver()
        PackageAssembler(archiver=recorder).assemble(
            sample_document().render(), build_parts(), tmp_path / "out.docx"
        )
        for text in recorder.files.values():
            assert text.startswith(XML_DECLARATION)
        assert "this is italic" in recorder.files["word/document.xml"]

    def test_staging_removed_after_success(self, tmp_path):
        staging_root = tmp_path / "staging"
        recorder = RecordingArchiver()
        PackageAssembler(archiver=recorder, staging_root=staging_root).assemble(
            sample_document().render(), build_parts(), tmp_path / "out.docx"
        )
        assert recorder.staging_dir.parent == staging_root
        assert not recorder.staging_dir.exists()
        assert list(staging_root.iterdir()) == []

    def test_staging_removed_after_failure(self, tmp_path):
        staging_root = tmp_path / "staging"
        assembler = PackageAssembler(archiver=FailingArchiver(), staging_root=staging_root)
        with pytest.raises(PackagingError, match="exploded"):
            assembler.assemble(sample_document().render(), build_parts(), tmp_path / "out.docx")
        assert list(staging_root.iterdir()) == []
        assert not (tmp_path / "out.docx").exists()

    def test_unique_staging_per_call(self, tmp_path):
        seen = []

        class Spy(RecordingArchiver):
            def archive(self, staging_dir, output_path):
                seen.append(staging_dir)
                super().archive(staging_dir, output_path)

        assembler = PackageAssembler(archiver=Spy(), staging_root=tmp_path / "staging")
        for name in ("a.docx", "b.docx"):
            assembler.assemble(sample_document().render(), build_parts(), tmp_path / name)
        assert seen[0] != seen[1]

    def test_creates_output_directory(self, tmp_path):
        out = tmp_path / "nested" / "dir" / "out.docx"
        PackageAssembler(archiver=RecordingArchiver()).assemble(
            sample_document().render(), build_parts(), out
        )
        assert out.exists()

    def test_output_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(StagingError):
            PackageAssembler(archiver=RecordingArchiver()).assemble(
                sample_document().render(), build_parts(), blocker / "out.docx"
            )

    def test_staging_error_is_packaging_and_os_error(self):
        assert issubclass(StagingError, PackagingError)
        assert issubclass(StagingError, OSError)

    def test_skeleton_failure_removes_staging(self, tmp_path, monkeypatch):
        monkeypatch.setattr(packager, "SKELETON_DIRS", ("word", "missing/parent"))
        staging_root = tmp_path / "staging"
        assembler = PackageAssembler(archiver=RecordingArchiver(), staging_root=staging_root)
        with pytest.raises(StagingError, match="cannot lay out"):
            assembler.assemble(sample_document().render(), build_parts(), tmp_path / "out.docx")
        assert list(staging_root.iterdir()) == []

    def test_unencodable_part_is_staging_error(self, tmp_path, monkeypatch):
        def write(elem, path):
            raise UnicodeEncodeError("utf-8", "\ud800", 0, 1, "surrogates not allowed")

        monkeypatch.setattr(packager.markup, "write", write)
        staging_root = tmp_path / "staging"
        assembler = PackageAssembler(archiver=RecordingArchiver(), staging_root=staging_root)
        with pytest.raises(StagingError, match="surrogates"):
            assembler.assemble(sample_document().render(), build_parts(), tmp_path / "out.docx")
        assert list(staging_root.iterdir()) == []
        assert not (tmp_path / "out.docx").exists()

    def test_cleanup_failure_does_not_hide_archiver_error(self, tmp_path, monkeypatch, caplog):
        def refuse(self, staging):
            raise StagingError(f"cannot remove staging directory {staging}: device busy")

        monkeypatch.setattr(PackageAssembler, "_remove_staging", refuse)
        assembler = PackageAssembler(archiver=FailingArchiver(), staging_root=tmp_path / "staging")
        with caplog.at_level(logging.WARNING, logger="minidocx.packager"):
            with pytest.raises(PackagingError, match="exploded") as exc_info:
                assembler.assemble(sample_document().render(), build_parts(), tmp_path / "out.docx")
        assert not isinstance(exc_info.value, StagingError)
        assert "device busy" in caplog.text

    def test_cleanup_failure_after_success_is_raised(self, tmp_path, monkeypatch):
        def refuse(self, staging):
            raise StagingError("device busy")

        monkeypatch.setattr(PackageAssembler, "_remove_staging", refuse)
        assembler = PackageAssembler(archiver=RecordingArchiver(), staging_root=tmp_path / "staging")
        with pytest.raises(StagingError, match="device busy"):
            assembler.assemble(sample_document().render(), build_parts(), tmp_path / "out.docx")


# ---------------------------------------------------------------------------
# Archivers
# ---------------------------------------------------------------------------

class TestZipArchiver:

    def test_layout(self, tmp_path):
        out = tmp_path / "out.docx"
        PackageAssembler(archiver=ZipArchiver()).assemble(
            sample_document().render(), build_parts(), out
        )
        with zipfile.ZipFile(out) as zf:
            names = zf.namelist()
            assert names[0] == "[Content_Types].xml"
            assert sorted(names) == list(STAGED_PATHS)
            assert zf.testzip() is None
            document = zf.read("word/document.xml").decode("utf-8")
        assert "<w:t>hello world</w:t>" in document

    def test_unwritable_output(self, tmp_path):
        staging = tmp_path / "staging"
        staging.mkdir()
        (staging / "[Content_Types].xml").write_text("<Types/>")
        target = tmp_path / "is_a_dir"
        target.mkdir()
        with pytest.raises(PackagingError):
            ZipArchiver().archive(staging, target)

    def test_replaces_existing_output(self, tmp_path):
        out = tmp_path / "out.docx"
        out.write_bytes(b"previous")
        PackageAssembler(archiver=ZipArchiver()).assemble(
            sample_document().render(), build_parts(), out
        )
        assert zipfile.is_zipfile(out)
        assert [p.name for p in tmp_path.iterdir()] == ["out.docx"]

    def test_failed_write_leaves_no_output(self, tmp_path, monkeypatch):
        fail_on_third_write(monkeypatch)
        dist = tmp_path / "dist"
        dist.mkdir()
        with pytest.raises(PackagingError, match="No space left"):
            PackageAssembler(archiver=ZipArchiver(), staging_root=tmp_path / "staging").assemble(
                sample_document().render(), build_parts(), dist / "out.docx"
            )
        assert list(dist.iterdir()) == []

    def test_failed_write_keeps_previous_output(self, tmp_path, monkeypatch):
        fail_on_third_write(monkeypatch)
        out = tmp_path / "out.docx"
        out.write_bytes(b"previous")
        with pytest.raises(PackagingError):
            PackageAssembler(archiver=ZipArchiver(), staging_root=tmp_path / "staging").assemble(
                sample_document().render(), build_parts(), out
            )
        assert out.read_bytes() == b"previous"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["out.docx", "staging"]


class TestCommandArchiver:

    def test_missing_command(self, tmp_path):
        archiver = CommandArchiver(command=("minidocx-no-such-archiver",))
        staging_root = tmp_path / "staging"
        with pytest.raises(PackagingError, match="cannot run archiver"):
            PackageAssembler(archiver=archiver, staging_root=staging_root).assemble(
                sample_document().render(), build_parts(), tmp_path / "out.docx"
            )
        assert list(staging_root.iterdir()) == []

    def test_nonzero_exit_keeps_previous_output(self, tmp_path):
        false = shutil.which("false")
        if false is None:
            pytest.skip("false not available")
        out = tmp_path / "out.docx"
        out.write_bytes(b"previous")
        with pytest.raises(PackagingError, match="exited with status"):
            PackageAssembler(archiver=CommandArchiver(command=(false,))).assemble(
                sample_document().render(), build_parts(), out
            )
        assert out.read_bytes() == b"previous"
        assert [p.name for p in tmp_path.iterdir()] == ["out.docx"]

    def test_zip_command(self, tmp_path):
        if shutil.which("zip") is None:
            pytest.skip("zip not installed")
        out = tmp_path / "out.docx"
        out.write_bytes(b"stale")
        PackageAssembler(archiver=CommandArchiver()).assemble(
            sample_document().render(), build_parts(), out
        )
        with zipfile.ZipFile(out) as zf:
            names = {n for n in zf.namelist() if not n.endswith("/")}
        assert names == set(STAGED_PATHS)


# ---------------------------------------------------------------------------
# Document.save
# ---------------------------------------------------------------------------

class TestDocumentSave:

    def test_save_round_trip(self, tmp_path):
        out = sample_document().save(tmp_path / "my_document.docx")
        assert out.name == "my_document.docx"
        with zipfile.ZipFile(out) as zf:
            assert set(zf.namelist()) == set(STAGED_PATHS)
            assert zf.read("word/document.xml").decode("utf-8") == (
                XML_DECLARATION + "\n" + sample_document().serialize()
            )

    def test_save_accepts_string_path(self, tmp_path):
        out = sample_document().save(str(tmp_path / "doc.docx"))
        assert zipfile.is_zipfile(out)

    def test_save_twice(self, tmp_path):
        doc = sample_document()
        first = doc.save(tmp_path / "one.docx")
        second = doc.save(tmp_path / "two.docx")
        assert first.exists() and second.exists()

    def test_save_with_failing_archiver(self, tmp_path):
        staging_root = tmp_path / "staging"
        with pytest.raises(PackagingError):
            sample_document().save(
                tmp_path / "out.docx", archiver=FailingArchiver(), staging_root=staging_root
            )
        assert list(staging_root.iterdir()) == []
