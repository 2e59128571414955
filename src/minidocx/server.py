"""FastAPI web service for Markdown to DOCX conversion.

Endpoints::

    GET  /health        Health check.
    GET  /styles        List available style presets.
    POST /convert       Upload a .md file and receive .docx back.
    POST /convert/text  Send raw Markdown text, receive .docx bytes.

Run::

    uvicorn minidocx.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from minidocx import __version__
from minidocx.converter import Converter
from minidocx.errors import FormatError, InvalidArgumentError, MinidocxError
from minidocx.style_manager import StyleManager

app = FastAPI(
    title="minidocx",
    description="Markdown to DOCX conversion service",
    version=__version__,
)

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _converter(style: str) -> Converter:
    try:
        return Converter(style_preset=style)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _render(converter: Converter, md_text: str) -> bytes:
    try:
        return converter.convert_text(md_text)
    except (InvalidArgumentError, FormatError) as exc:
        raise HTTPException(status_code=400, detail=f"invalid document content: {exc}") from exc
    except MinidocxError as exc:
        raise HTTPException(status_code=500, detail=f"conversion failed: {exc}") from exc


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_styles() -> dict[str, list[str]]:
    """List available style presets."""
    return {"presets": StyleManager.PRESETS}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    style: str = Form("default"),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a Markdown file and receive DOCX back.

    - **file**: Markdown file (.md)
    - **style**: Style preset name (default, academic, business, minimal)
    - **encoding**: Source file encoding
    """
    converter = _converter(style)
    raw = await file.read()
    try:
        md_text = raw.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail=f"cannot decode upload: {exc}") from exc

    docx_bytes = _render(converter, md_text)

    filename = (file.filename or "document.md").rsplit(".", 1)[0] + ".docx"

    return Response(
        content=docx_bytes,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@app.post("/convert/text")
async def convert_text(
    markdown: str = Form(...),
    style: str = Form("default"),
) -> Response:
    """Send raw Markdown text and receive DOCX bytes.

    - **markdown**: Markdown source text
    - **style**: Style preset name
    """
    converter = _converter(style)
    docx_bytes = _render(converter, markdown)

    return Response(
        content=docx_bytes,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="document.docx"'},
    )
