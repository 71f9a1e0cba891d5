import base64
import io

import pytest
from PIL import Image as PILImage

from odoolink.helpers import image_to_base64
from odoolink.helpers.image import encode_image


def _decode(b64: str) -> PILImage.Image:
    img = PILImage.open(io.BytesIO(base64.b64decode(b64, validate=True)))
    img.load()
    return img


@pytest.mark.parametrize("mode, suffix", [("RGB", "png"), ("RGBA", "png"), ("L", "bmp"), ("P", "gif")])
def test_image_to_base64_is_jpeg(tmp_path, mode, suffix):
    path = tmp_path / f"picture.{suffix}"
    PILImage.new(mode, (32, 16)).save(path)

    decoded = _decode(image_to_base64(path))
    assert decoded.format == "JPEG"
    assert decoded.size == (32, 16)


def test_image_to_base64_other_format(tmp_path):
    path = tmp_path / "picture.jpg"
    PILImage.new("RGB", (8, 8), color=(200, 10, 10)).save(path)

    decoded = _decode(image_to_base64(str(path), format="PNG"))
    assert decoded.format == "PNG"
    assert decoded.getpixel((0, 0))[0] > 150


def test_encode_image_quality():
    img = PILImage.effect_noise((64, 64), 64).convert("RGB")
    assert len(encode_image(img, quality=20)) < len(encode_image(img, quality=95))


def test_missing_file(tmp_path):
    with pytest.raises(ValueError, match="Unable to encode image"):
        image_to_base64(tmp_path / "missing.png")


def test_not_an_image(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not an image")
    with pytest.raises(ValueError, match="Unable to encode image"):
        image_to_base64(path)
