"""Unit tests for response content encoding."""

import base64

import pytest

from autoresponder.encoding.content import (
    DEFAULT_MIME_TYPE,
    decode_payload,
    encode,
    format_json_content,
    load_content_file,
    resolve_mime_type,
    to_data_url,
)
from autoresponder.errors import ContentEncodingError

TEXT_TYPES = ["html", "js", "javascript", "css", "json", "xml", "text", "svg"]
BINARY_TYPES = ["png", "jpg", "jpeg", "gif", "webp", "ico", "woff", "woff2", "ttf", "eot"]


@pytest.mark.parametrize("response_type", TEXT_TYPES)
def test_text_content_roundtrips(response_type):
    """UTF-8 -> base64 -> decode gives back the original text."""
    content = "héllo <b>wörld</b> 🎉\n"
    mime_type, payload = encode(content, response_type)

    assert payload.isascii()
    assert base64.b64decode(payload).decode("utf-8") == content
    assert decode_payload(payload).decode("utf-8") == content


@pytest.mark.parametrize("response_type", BINARY_TYPES)
def test_binary_content_passes_through(response_type):
    """Binary kinds are assumed to be base64 already and are not touched."""
    content = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAAB"
    _, payload = encode(content, response_type)
    assert payload == content


def test_invalid_base64_for_binary_is_not_checked():
    _, payload = encode("not base64 at all!", "png")
    assert payload == "not base64 at all!"
    with pytest.raises(ValueError):
        decode_payload(payload)


def test_mime_table():
    assert resolve_mime_type("html") == "text/html;charset=utf-8"
    assert resolve_mime_type("JS") == "application/javascript;charset=utf-8"
    assert resolve_mime_type("svg") == "image/svg+xml;charset=utf-8"
    assert resolve_mime_type("jpg") == "image/jpeg"
    assert resolve_mime_type("eot") == "application/vnd.ms-fontobject"


def test_unknown_type_defaults_to_plain_text():
    mime_type, payload = encode("abc", "markdown")
    assert mime_type == DEFAULT_MIME_TYPE
    assert payload == base64.b64encode(b"abc").decode("ascii")


def test_encode_is_deterministic():
    assert encode("same", "json") == encode("same", "json")


def test_non_string_content_rejected():
    with pytest.raises(ContentEncodingError):
        encode(b"bytes", "html")


def test_data_url():
    mime_type, payload = encode("<p>", "html")
    assert to_data_url(mime_type, payload) == "data:text/html;charset=utf-8;base64,PHA+"


def test_format_json_content():
    assert format_json_content('{"a":1}') == '{\n  "a": 1\n}'
    with pytest.raises(ValueError):
        format_json_content("{nope")


def test_load_content_file(tmp_path):
    """Text files come back as text, images as base64."""
    script = tmp_path / "app.mjs"
    script.write_text("export default 1;\n", encoding="utf-8")
    image = tmp_path / "pixel.PNG"
    image.write_bytes(b"\x89PNG\r\n")
    other = tmp_path / "notes.md"
    other.write_text("# hi", encoding="utf-8")

    assert load_content_file(script) == ("export default 1;\n", "js")
    assert load_content_file(image) == (base64.b64encode(b"\x89PNG\r\n").decode("ascii"), "png")
    assert load_content_file(other) == ("# hi", None)
