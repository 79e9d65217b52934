"""Turn response bodies into mime types and base64 payloads."""

import base64
import binascii
import json
from pathlib import Path
from typing import Dict, Tuple

from ..errors import ContentEncodingError

DEFAULT_MIME_TYPE = "text/plain;charset=utf-8"

MIME_TYPES: Dict[str, str] = {
    "html": "text/html;charset=utf-8",
    "js": "application/javascript;charset=utf-8",
    "javascript": "application/javascript;charset=utf-8",
    "css": "text/css;charset=utf-8",
    "json": "application/json;charset=utf-8",
    "xml": "application/xml;charset=utf-8",
    "text": "text/plain;charset=utf-8",
    "svg": "image/svg+xml;charset=utf-8",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "eot": "application/vnd.ms-fontobject",
}

TEXT_MIME_MARKERS = ("text", "javascript", "json", "xml", "svg")

# File extension -> response type for content loaded from disk
TEXT_EXTENSIONS: Dict[str, str] = {
    "html": "html",
    "htm": "html",
    "js": "js",
    "mjs": "js",
    "css": "css",
    "json": "json",
    "xml": "xml",
    "txt": "text",
    "svg": "svg",
}
BINARY_EXTENSIONS: Dict[str, str] = {
    "png": "png",
    "jpg": "jpg",
    "jpeg": "jpg",
    "gif": "gif",
    "webp": "webp",
    "ico": "ico",
    "woff": "woff",
    "woff2": "woff2",
    "ttf": "ttf",
    "eot": "eot",
}


def resolve_mime_type(response_type: str) -> str:
    """Look up the mime type for a response type (case-insensitive)."""
    return MIME_TYPES.get((response_type or "").lower(), DEFAULT_MIME_TYPE)


def is_text_mime(mime_type: str) -> bool:
    return any(marker in mime_type for marker in TEXT_MIME_MARKERS)


def encode(content: str, response_type: str) -> Tuple[str, str]:
    """
    Encode response content for embedding in a data URL.

    Text kinds are UTF-8 encoded and then base64 encoded. Binary kinds are
    expected to be base64 already and are returned unchanged, without any
    check that they decode.

    Args:
        content: Response body
        response_type: Declared content kind (html, json, png, ...)

    Returns:
        (mime_type, payload) where payload is ASCII base64 text

    Raises:
        ContentEncodingError: If content is not a string
    """
    if not isinstance(content, str):
        raise ContentEncodingError(f"Response content must be a string, got {type(content).__name__}")

    mime_type = resolve_mime_type(response_type)
    if is_text_mime(mime_type):
        payload = base64.b64encode(content.encode("utf-8")).decode("ascii")
    else:
        payload = content
    return mime_type, payload


def decode_payload(payload: str) -> bytes:
    """
    Decode a payload produced by `encode` back into raw bytes.

    Raises:
        ValueError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Payload is not valid base64: {exc}") from exc


def to_data_url(mime_type: str, payload: str) -> str:
    return f"data:{mime_type};base64,{payload}"


def format_json_content(content: str) -> str:
    """
    Pretty-print JSON response content with a 2-space indent.

    Raises:
        ValueError: If content is not valid JSON
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Content is not valid JSON: {exc}") from exc
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def load_content_file(path: Path | str) -> Tuple[str, str | None]:
    """
    Read a response body from disk.

    Text files are returned as-is. Image and font files are returned as
    base64 so they can be stored in `responseContent` directly.

    Returns:
        (content, response_type) where response_type is None when the
        extension is not recognised (content is then read as text)
    """
    file_path = Path(path)
    ext = file_path.suffix.lstrip(".").lower()
    if ext in BINARY_EXTENSIONS:
        data = file_path.read_bytes()
        return base64.b64encode(data).decode("ascii"), BINARY_EXTENSIONS[ext]
    return file_path.read_text(encoding="utf-8"), TEXT_EXTENSIONS.get(ext)
