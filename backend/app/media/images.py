"""Image upload checks - accepted types, dimension check, data URLs."""

import base64
import io

from PIL import Image, UnidentifiedImageError

ACCEPTED_IMAGE_TYPES = ("image/png", "image/jpeg")


class InvalidImageError(Exception):
    """Uploaded bytes are not a readable image."""

    pass


def normalize_image_mime(mime: str | None) -> str:
    """Lowercase a MIME type and drop parameters (``; name=...``)."""
    return (mime or "").split(";", 1)[0].strip().lower()


def is_accepted_image_type(mime: str | None) -> bool:
    """Return True for PNG and JPEG uploads."""
    return normalize_image_mime(mime) in ACCEPTED_IMAGE_TYPES


def read_image_size(content: bytes) -> tuple[int, int]:
    """Read (width, height) from image bytes without decoding pixel data.

    Raises:
        InvalidImageError: If the bytes are not an image, a dimension is zero,
            or the declared pixel count trips Pillow's decompression bomb guard
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            width, height = img.size
    except Image.DecompressionBombError as e:
        raise InvalidImageError("The uploaded image is too large.") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidImageError("Could not read the uploaded image size.") from e

    if not width or not height:
        raise InvalidImageError("Could not read the uploaded image size.")

    return width, height


def to_data_url(content: bytes, mime: str = "image/png") -> str:
    """Encode bytes as a ``data:`` URL."""
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"
