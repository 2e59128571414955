"""Command-line interface for minidocx.

Usage::

    minidocx notes.md                          # writes notes.docx
    minidocx notes.md -o out/report.docx -s business
    minidocx notes.md --font-size 11 --title "Q3 report" --author "Finance"
    minidocx notes.md --zip-command            # pack with the external zip tool
    minidocx notes.md --print                  # dump word/document.xml to stdout
    minidocx --list-styles
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path

from minidocx import __version__
from minidocx.converter import Converter
from minidocx.errors import MinidocxError
from minidocx.packager import CommandArchiver
from minidocx.parts import CoreProperties
from minidocx.style_manager import StyleManager

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_ZIP_COMMAND = "zip -r -X -q"


def _font_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a whole number of points: {value!r}") from None
    if size < 1:
        raise argparse.ArgumentTypeError(f"font size must be positive, got {size}")
    return size


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minidocx",
        description="Build a .docx (Office Open XML) document from Markdown.",
    )
    parser.add_argument("input", nargs="?", help="Markdown file to convert.")
    parser.add_argument(
        "-o", "--output",
        help="Container to write. Defaults to the input name with a .docx suffix.",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )

    layout = parser.add_argument_group("layout")
    layout.add_argument(
        "-s", "--style",
        default="default",
        choices=StyleManager.PRESETS,
        help="Font and heading-size preset (default: %(default)s).",
    )
    layout.add_argument(
        "--font-size",
        type=_font_size,
        metavar="PT",
        help="Ambient body size in points, overriding the preset.",
    )

    meta = parser.add_argument_group("document properties")
    meta.add_argument("--title", default="", help="dc:title in docProps/core.xml.")
    meta.add_argument("--subject", default="", help="dc:subject.")
    meta.add_argument("--author", default="", help="dc:creator.")
    meta.add_argument("--description", default="", help="dc:description.")
    meta.add_argument(
        "--language",
        default="en-US",
        help="dc:language tag (default: %(default)s).",
    )

    packing = parser.add_argument_group("packaging")
    packing.add_argument(
        "--zip-command",
        nargs="?",
        const=DEFAULT_ZIP_COMMAND,
        metavar="CMD",
        help=(
            "Archive with an external command run inside the staging directory "
            f"instead of zipfile (default command: {DEFAULT_ZIP_COMMAND!r})."
        ),
    )
    packing.add_argument(
        "--staging-dir",
        metavar="DIR",
        help="Directory under which the temporary package tree is built.",
    )
    packing.add_argument(
        "--print",
        dest="print_xml",
        action="store_true",
        help="Write the word/document.xml markup to stdout instead of a container.",
    )

    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="List the style presets with their sizes and fonts, then exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information and debug logs.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _list_styles() -> None:
    print("Available style presets:")
    for name in StyleManager.PRESETS:
        preset = StyleManager(name).style
        print(
            f"  - {name:<9} {preset.ambient_size}pt  "
            f"body {preset.body_font.name}, headings {preset.heading_font.name}"
        )


def _converter(args: argparse.Namespace) -> Converter:
    archiver = None
    if args.zip_command:
        archiver = CommandArchiver(shlex.split(args.zip_command))
    properties = CoreProperties(
        title=args.title,
        subject=args.subject,
        creator=args.author,
        description=args.description,
        language=args.language,
    )
    return Converter(
        style_preset=args.style,
        archiver=archiver,
        ambient_font_size=args.font_size,
        properties=properties,
        staging_root=args.staging_dir,
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    if args.list_styles:
        _list_styles()
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else input_path.with_suffix(".docx")

    if args.verbose and not args.print_xml:
        print(f"Input:  {input_path}")
        print(f"Output: {output_path}")
        print(f"Style:  {args.style}")
        if args.zip_command:
            print(f"Packer: {args.zip_command}")

    try:
        converter = _converter(args)
        if args.print_xml:
            doc = converter.build(input_path.read_text(encoding=args.encoding))
            doc.print()
            return 0
        converter.convert_file(input_path, output_path, encoding=args.encoding)
    except (MinidocxError, OSError, UnicodeDecodeError, LookupError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
