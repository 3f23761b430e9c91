"""Filesystem helpers for staging tool input and output files.

Reads and writes go through ``anyio.Path`` and never block the event loop.
"""
from __future__ import annotations

import base64
from pathlib import Path

import anyio

_CONTENT_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    ".webp": "image/webp",
    ".xml": "application/xml",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _resolve(path: str | Path) -> anyio.Path:
    return anyio.Path(Path(path).expanduser())


async def read_file_bytes(path: str | Path) -> bytes:
    return await _resolve(path).read_bytes()


async def read_file_text(path: str | Path) -> str:
    return await _resolve(path).read_text(encoding="utf-8")


async def save_file(path: str | Path, data: bytes) -> Path:
    """Write ``data`` to ``path``, creating parent directories as needed."""

    target = _resolve(path)
    await target.parent.mkdir(parents=True, exist_ok=True)
    await target.write_bytes(data)
    return Path(target)


def content_type_for(path: str | Path) -> str:
    return _CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def file_name(path: str | Path) -> str:
    return Path(path).name


async def encode_file(
    path: str | Path, content_type: str | None = None
) -> dict[str, str]:
    """Read a file into the ``{content, contentType, fileName}`` envelope."""

    data = await read_file_bytes(path)
    return {
        "content": base64.b64encode(data).decode("ascii"),
        "contentType": content_type or content_type_for(path),
        "fileName": file_name(path),
    }


__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "content_type_for",
    "encode_file",
    "file_name",
    "read_file_bytes",
    "read_file_text",
    "save_file",
]
