"""Validation helpers for uploaded and captured images."""

import base64
import binascii
import re
from datetime import datetime, timezone
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional, Tuple

from fastapi import UploadFile

from models.errors import ValidationError
from models.match_models import CandidateImage

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
}
_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg", "image/x-png": "image/png"}
_EXTENSION_TYPES = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png"}
_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._ -]+")


def normalize_image_type(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """Return the canonical MIME type for a JPEG or PNG upload.

    The declared content type wins; the filename extension is only consulted
    when no content type was sent.

    Raises:
        ValidationError: If the type is anything other than JPEG or PNG.
    """
    if content_type:
        mime = content_type.lower().split(";", 1)[0].strip()
        mime = _MIME_ALIASES.get(mime, mime)
    elif filename:
        mime = _EXTENSION_TYPES.get(PurePosixPath(filename.lower()).suffix, "")
    else:
        mime = ""
    if mime not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported image content type: {content_type or filename or 'unknown'}")
    return mime


def safe_filename(filename: Optional[str]) -> str:
    """Reduce a client-supplied filename to a safe basename.

    Raises:
        ValueError: If nothing usable remains.
    """
    # Browsers on Windows may send full paths.
    base = PureWindowsPath(PurePosixPath(filename or "").name).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip(" .")
    if not cleaned:
        raise ValueError("Image must have a filename.")
    return cleaned


def capture_name(mime_type: str, now: Optional[datetime] = None) -> str:
    """Generate a name for a camera capture, e.g. `capture-20240101T120000123456.png`."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%S%f")
    return f"capture-{stamp}{ALLOWED_IMAGE_TYPES[mime_type]}"


def decode_data_uri(data_uri: str) -> Tuple[bytes, str]:
    """Decode a `data:image/...;base64,` URI into bytes and a canonical MIME type.

    Raises:
        ValidationError: If the embedded type is not JPEG or PNG.
        ValueError: If the URI is malformed or the payload is empty.
    """
    match = _DATA_URI.match((data_uri or "").strip())
    if not match:
        raise ValueError("Capture must be a base64 data URI.")
    mime = normalize_image_type(match.group("mime"))
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Capture payload is not valid base64.") from exc
    if not data:
        raise ValueError("Captured image is empty.")
    return data, mime


def candidate_from_bytes(data: bytes, content_type: Optional[str], filename: Optional[str]) -> CandidateImage:
    """Validate raw upload bytes and wrap them as a CandidateImage."""
    mime = normalize_image_type(content_type, filename)
    if not data:
        raise ValueError("Uploaded image is empty.")
    return CandidateImage(data=data, mime_type=mime, name=safe_filename(filename))


def candidate_from_capture(data_uri: str, name: Optional[str] = None) -> CandidateImage:
    """Build a CandidateImage from a camera capture data URI."""
    data, mime = decode_data_uri(data_uri)
    return CandidateImage(data=data, mime_type=mime, name=safe_filename(name) if name else capture_name(mime))


async def read_image_upload(image: UploadFile) -> CandidateImage:
    """Read a multipart image upload, rejecting non-JPEG/PNG types before reading the body."""
    mime = normalize_image_type(image.content_type, image.filename)
    data = await image.read()
    return candidate_from_bytes(data, mime, image.filename)
