"""
Image Encoding Module.

Binary fields such as a partner or product picture are transported as
base64 text. This module turns a local image file into that representation,
re-encoding it with Pillow so that the server receives a compressed image
whatever the source format was.
"""

import base64
import io
import logging as log
from pathlib import Path
from typing import Union

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

_DEFAULT_IMG_FORMAT = "JPEG"

# Pillow modes that can be written as JPEG without conversion
_JPEG_MODES = ("RGB", "L", "CMYK")


def encode_image(
    image: PILImage.Image, format: str = _DEFAULT_IMG_FORMAT, **kwargs
) -> bytes:
    """
    Encodes a Pillow image into compressed bytes.

    Args:
        image: The source Pillow image.
        format: The target container (default: 'JPEG').
        **kwargs: Additional arguments passed to `PIL.Image.save` (e.g. quality=90).

    Returns:
        bytes: The encoded image.
    """
    fmt = format.upper()
    if fmt in ("JPEG", "JPG"):
        fmt = "JPEG"
        if image.mode not in _JPEG_MODES:
            # JPEG has no alpha channel nor palette
            image = image.convert("RGB")

    buf = io.BytesIO()
    image.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def image_to_base64(
    image_path: Union[str, Path], format: str = _DEFAULT_IMG_FORMAT, **kwargs
) -> str:
    """
    Loads an image file and returns it re-encoded as a base64 string, ready to
    be used as the value of a binary field in `create` or `update`.

    Args:
        image_path: Path of the image file.
        format: The target container (default: 'JPEG').
        **kwargs: Additional arguments passed to `PIL.Image.save`.

    Returns:
        str: The base64 (standard alphabet) text of the encoded image.

    Raises:
        ValueError: If the file cannot be opened or decoded as an image.
    """
    path = Path(image_path)
    try:
        with PILImage.open(path) as img:
            img.load()
            data = encode_image(img, format=format, **kwargs)
    except (OSError, UnidentifiedImageError) as e:
        log.error(f"Unable to encode image '{path}': {e}")
        raise ValueError(f"Unable to encode image '{path}': {e}") from e

    return base64.b64encode(data).decode("ascii")
