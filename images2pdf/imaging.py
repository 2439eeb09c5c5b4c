from pathlib import Path
from typing import Union

import pillow_heif
from PIL import Image, ImageOps

from .errors import DecodeError

# HEIC/HEIF (and AVIF on older Pillow) come through the pillow-heif opener.
pillow_heif.register_heif_opener()

_DECODE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


def _transpose_exif(image: Image.Image) -> Image.Image:
    try:
        return ImageOps.exif_transpose(image)
    except Exception:
        return image


def _has_transparency(image: Image.Image) -> bool:
    if image.mode in ("RGBA", "LA"):
        return True
    if image.mode == "P" and "transparency" in image.info:
        return True
    return False


def _flatten_alpha(image: Image.Image, background_rgb=(255, 255, 255)) -> Image.Image:
    if _has_transparency(image):
        base = Image.new("RGB", image.size, background_rgb)
        rgba = image.convert("RGBA")
        base.paste(rgba, mask=rgba.getchannel("A"))
        return base
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    return image


def decode_image(path: Union[str, Path], auto_rotate: bool = True) -> Image.Image:
    """Decode ``path`` into an RGB or L image ready to be drawn.

    Transparent areas are flattened onto white. Raises DecodeError when the
    file cannot be read as an image.
    """
    path = Path(path)
    try:
        with Image.open(path) as im:
            im.load()
            prepared = _transpose_exif(im) if auto_rotate else im
            prepared = _flatten_alpha(prepared)
            if prepared is im:
                prepared = im.copy()
    except _DECODE_ERRORS as exc:
        raise DecodeError(f"Could not decode {path.name}: {exc}", path) from exc

    if prepared.width <= 0 or prepared.height <= 0:
        raise DecodeError(f"Image has no pixels: {path.name}", path)
    return prepared


def to_grayscale(image: Image.Image) -> Image.Image:
    if image.mode == "L":
        return image
    return image.convert("L")
