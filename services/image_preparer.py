"""Image preparation for labeling requests.

Provides a small OOP wrapper around Pillow that checks uploaded bytes really
are a JPEG or PNG image and re-encodes them as a bounded-size JPEG before they
are sent to the labeling model.

Public class: `ImagePreparer`

Example:
    preparer = ImagePreparer(max_size=(1024, 1024))
    jpeg_bytes = preparer.prepare(raw_bytes)
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

SUPPORTED_FORMATS = ("JPEG", "PNG")


class ImagePreparer:
    """Validate and downscale image bytes for the labeling model.

    Args:
        max_size: Maximum width and height of the prepared image. Defaults to (1024, 1024).
        background: Color used when flattening images with alpha. Defaults to white.
        quality: JPEG quality of the prepared image.
    """

    def __init__(
        self,
        max_size: Tuple[int, int] = (1024, 1024),
        background: Tuple[int, int, int] | None = None,
        quality: int = 85,
    ):
        self.max_size = max_size
        self.background = background or (255, 255, 255)
        self.quality = quality

    def detect_format(self, data: bytes) -> str:
        """Return the Pillow format name of `data`.

        Raises:
            ValueError: If the bytes are empty, unreadable, or not JPEG/PNG.
        """
        if not data:
            raise ValueError("Image bytes are empty")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
                fmt = img.format
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ValueError("Bytes are not a readable image") from exc
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported image format: {fmt}")
        return fmt

    def prepare(self, data: bytes) -> bytes:
        """Return `data` re-encoded as an RGB JPEG that fits within `max_size`.

        Raises:
            ValueError: If the bytes cannot be decoded as a JPEG or PNG image.
        """
        self.detect_format(data)

        # verify() leaves the image unusable, so reopen for decoding.
        try:
            src = Image.open(io.BytesIO(data))
            src.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Image data is truncated or corrupt") from exc

        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        background = Image.new("RGB", src.size, self.background)
        background.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        background.save(out_io, format="JPEG", quality=self.quality)
        return out_io.getvalue()
