"""Embedded asset detection, decoding and format sniffing.

Classification is returned by value; only ``extract_bytes`` raises, and its
errors are the decode/unsupported-format taxonomy from ``models.errors``.
"""

import base64
import binascii
import re
import struct
from enum import Enum
from typing import Any
from urllib.parse import unquote_to_bytes

from ..config import settings
from ..models.asset import ASSET_REFERENCE_PREFIX, ImageDimensions
from ..models.errors import AssetDecodeError, UnsupportedAssetFormatError

OCTET_STREAM = "application/octet-stream"

EXTERNAL_PREFIXES = ("http://", "https://", "/", "./", "../", ASSET_REFERENCE_PREFIX)

# data:[<mediatype>][;param=value...][;base64],<data>
_DATA_URI_PATTERN = re.compile(r"^data:([^;,]+)(?:;[^,]*)?,(.+)$", re.DOTALL)
_RAW_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")
_BASE64_BODY_PATTERN = re.compile(r"^[A-Za-z0-9+/]+=*$")
_WHITESPACE = re.compile(r"\s")

# JPEG Start-Of-Frame markers that are not frames.
_JPEG_NON_SOF_MARKERS = {0xC4, 0xC8, 0xCC}


class ValueKind(str, Enum):
    """How a document string value should be treated."""

    EXTERNAL = "external"
    EMBEDDED = "embedded"
    PLAIN = "plain"


def is_external_reference(value: Any) -> bool:
    """Check if a value is a URL, a path or an existing asset reference."""
    return isinstance(value, str) and value.startswith(EXTERNAL_PREFIXES)


def is_embedded_asset(value: Any, min_base64_length: int | None = None) -> bool:
    """Check if a value is inline binary data (data URI, blob URL or raw base64).

    The raw base64 rule is a heuristic: strings longer than the threshold made
    only of base64 characters are treated as payloads, shorter ones as text.
    """
    if not isinstance(value, str):
        return False

    if value.startswith(("data:", "blob:")):
        return True

    threshold = settings.raw_base64_min_length if min_base64_length is None else min_base64_length
    return (
        len(value) > threshold
        and bool(_RAW_BASE64_PATTERN.match(value))
        and "://" not in value
        and not value.startswith("/")
    )


def classify(value: Any, min_base64_length: int | None = None) -> ValueKind:
    """Classify a value as an external reference, an embedded asset or plain data."""
    if is_external_reference(value):
        return ValueKind.EXTERNAL
    if is_embedded_asset(value, min_base64_length):
        return ValueKind.EMBEDDED
    return ValueKind.PLAIN


def declared_mime_type(value: str) -> str | None:
    """Return the media type declared by a data URI, if any."""
    match = _DATA_URI_PATTERN.match(value)
    if not match:
        return None
    return match.group(1).strip().lower() or None


def extract_bytes(value: str) -> bytes:
    """
    Decode an embedded asset to raw bytes.

    Args:
        value: A data URI or raw base64 string.

    Returns:
        The decoded bytes.

    Raises:
        AssetDecodeError: If the data URI or base64 payload is malformed.
        UnsupportedAssetFormatError: For blob URLs and unrecognized values.
    """
    if value.startswith("data:"):
        match = _DATA_URI_PATTERN.match(value)
        if not match:
            raise AssetDecodeError(value, "invalid data URI format")
        header, payload = value.split(",", 1)
        if header.endswith(";base64"):
            return _decode_base64(value, payload)
        return unquote_to_bytes(payload)

    if value.startswith("blob:"):
        raise UnsupportedAssetFormatError(
            value,
            "Blob URLs cannot be converted - they must be resolved to actual data first",
        )

    if _BASE64_BODY_PATTERN.match(value):
        return _decode_base64(value, value)

    raise UnsupportedAssetFormatError(value)


def _decode_base64(value: str, payload: str) -> bytes:
    cleaned = _WHITESPACE.sub("", payload)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AssetDecodeError(value, f"invalid base64 payload ({e})") from e


def detect_mime_type(data: bytes) -> str:
    """Detect a MIME type from magic bytes; unknown data is application/octet-stream."""
    if len(data) < 4:
        return OCTET_STREAM

    header = data[:12]

    if header.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if header.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if header.startswith(b"RIFF") and header[8:12] == b"WEBP":
        return "image/webp"
    if b"ftypavif" in header:
        return "image/avif"
    if header.startswith(b"GIF8"):
        return "image/gif"
    if header[4:8] == b"ftyp":
        return "video/mp4"
    if header.startswith(b"\x1a\x45\xdf\xa3"):
        return "video/webm"
    if header.startswith(b"wOF2"):
        return "font/woff2"
    if header.startswith(b"wOFF"):
        return "font/woff"
    if header.startswith(b"\x00\x01\x00\x00"):
        return "font/ttf"
    if header.startswith(b"OTTO"):
        return "font/otf"

    return OCTET_STREAM


def probe_image_dimensions(data: bytes, mime_type: str) -> ImageDimensions | None:
    """
    Read pixel dimensions from a PNG, JPEG or GIF header.

    Returns None for other formats and for truncated or inconsistent data.
    """
    try:
        if mime_type == "image/png":
            return _png_dimensions(data)
        if mime_type == "image/jpeg":
            return _jpeg_dimensions(data)
        if mime_type == "image/gif":
            return _gif_dimensions(data)
    except (struct.error, IndexError):
        return None
    return None


def _png_dimensions(data: bytes) -> ImageDimensions | None:
    # 8-byte signature, 4-byte chunk length, "IHDR", then width and height.
    if len(data) < 24:
        return None
    width, height = struct.unpack_from(">II", data, 16)
    return ImageDimensions(width=width, height=height)


def _jpeg_dimensions(data: bytes) -> ImageDimensions | None:
    offset = 2
    while offset < len(data) - 9:
        if data[offset] != 0xFF:
            return None

        marker = data[offset + 1]
        if 0xC0 <= marker <= 0xCF and marker not in _JPEG_NON_SOF_MARKERS:
            height, width = struct.unpack_from(">HH", data, offset + 5)
            return ImageDimensions(width=width, height=height)

        (segment_length,) = struct.unpack_from(">H", data, offset + 2)
        if segment_length < 2:
            return None
        offset += segment_length + 2

    return None


def _gif_dimensions(data: bytes) -> ImageDimensions | None:
    if len(data) < 10:
        return None
    width, height = struct.unpack_from("<HH", data, 6)
    return ImageDimensions(width=width, height=height)
