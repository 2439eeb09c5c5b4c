import os
from pathlib import Path
from typing import List, Tuple, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from .errors import ValidationError

SUPPORTED_IMAGE_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".bmp",
    ".gif",
    ".webp",
    ".tif",
    ".tiff",
    ".jfif",
    ".heic",
    ".heif",
    ".avif",
}

PathLike = Union[str, Path]


def has_supported_extension(path: PathLike) -> bool:
    return Path(path).suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS


def image_filetypes() -> List[Tuple[str, str]]:
    patterns = " ".join([f"*{ext}" for ext in sorted(SUPPORTED_IMAGE_EXTENSIONS)])
    return [("Image files", patterns), ("All files", "*")]


def _looks_like_url(text: str) -> bool:
    return "://" in text or text.lower().startswith("file:")


def to_local_path(raw: PathLike) -> Path:
    """Turn user input (plain path or ``file://`` URL) into a local path.

    Raises ValidationError for empty input and for any non-``file`` URL scheme.
    """
    if isinstance(raw, Path):
        return raw.expanduser()

    text = (raw or "").strip()
    if not text:
        raise ValidationError("Empty path")

    if _looks_like_url(text):
        parsed = urlparse(text)
        if parsed.scheme.lower() != "file":
            raise ValidationError(f"Only local files are supported: {text}")
        if parsed.netloc and parsed.netloc.lower() != "localhost":
            raise ValidationError(f"Only local files are supported: {text}")
        text = url2pathname(parsed.path)
        if not text:
            raise ValidationError("Empty path")

    return Path(os.path.expanduser(text))


def canonical_path(path: PathLike) -> Path:
    # Absolute, with symlinks and ".." segments resolved.
    return Path(path).expanduser().resolve()


def resolve_image_file(raw: PathLike) -> Path:
    path = canonical_path(to_local_path(raw))
    if not path.exists():
        raise ValidationError(f"File does not exist: {path}")
    if not path.is_file():
        raise ValidationError(f"Not a regular file: {path}")
    return path


def resolve_directory(raw: PathLike) -> Path:
    path = canonical_path(to_local_path(raw))
    if not path.is_dir():
        raise ValidationError(f"Folder does not exist: {path}")
    return path
