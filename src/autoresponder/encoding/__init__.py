"""Response payload encoding."""

from .content import (
    DEFAULT_MIME_TYPE,
    MIME_TYPES,
    decode_payload,
    encode,
    format_json_content,
    is_text_mime,
    load_content_file,
    resolve_mime_type,
    to_data_url,
)

__all__ = [
    "DEFAULT_MIME_TYPE",
    "MIME_TYPES",
    "decode_payload",
    "encode",
    "format_json_content",
    "is_text_mime",
    "load_content_file",
    "resolve_mime_type",
    "to_data_url",
]
