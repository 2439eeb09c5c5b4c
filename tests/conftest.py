import os
from pathlib import Path

import pytest
from PIL import Image

from images2pdf import ConversionConfig, ImageEntry


def make_image(path: Path, size=(40, 30), color="red", mode="RGB") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


def set_mtime(path: Path, seconds: int) -> None:
    os.utime(path, ns=(seconds * 10**9, seconds * 10**9))


@pytest.fixture
def photo_dir(tmp_path):
    """Three decodable images plus one file that only pretends to be a JPEG."""
    root = tmp_path / "photos"
    make_image(root / "img1.png", color="red")
    make_image(root / "img2.jpg", size=(60, 20), color="green")
    make_image(root / "img10.bmp", size=(20, 60), color="blue")
    (root / "broken.jpg").write_bytes(b"this is not a jpeg")
    return root


@pytest.fixture
def good_entries(photo_dir):
    names = ["img1.png", "img2.jpg", "img10.bmp"]
    return [ImageEntry((photo_dir / name).resolve()) for name in names]


@pytest.fixture
def output_pdf(tmp_path):
    return tmp_path / "out" / "result.pdf"


@pytest.fixture
def config(output_pdf):
    return ConversionConfig(output_path=str(output_pdf))
