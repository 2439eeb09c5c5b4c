from pathlib import Path

import pytest

from images2pdf.errors import ValidationError
from images2pdf.paths import (
    has_supported_extension,
    resolve_directory,
    resolve_image_file,
    to_local_path,
)


def test_plain_path_is_returned_as_path():
    assert to_local_path("/tmp/photo.png") == Path("/tmp/photo.png")


def test_file_url_is_converted():
    assert to_local_path("file:///tmp/photo.png") == Path("/tmp/photo.png")


def test_file_url_percent_escapes_are_decoded():
    assert to_local_path("file:///tmp/my%20photo.png") == Path("/tmp/my photo.png")


def test_localhost_file_url_is_accepted():
    assert to_local_path("file://localhost/tmp/a.png") == Path("/tmp/a.png")


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "http://example.com/a.png", "https://example.com/a.png", "file://otherhost/a.png"],
)
def test_non_local_or_empty_input_is_rejected(raw):
    with pytest.raises(ValidationError):
        to_local_path(raw)


def test_extension_check_is_case_insensitive():
    assert has_supported_extension("HOLIDAY.JPG")
    assert has_supported_extension("scan.tiff")
    assert not has_supported_extension("notes.txt")
    assert not has_supported_extension("README")


def test_resolve_image_file_rejects_missing_and_directories(tmp_path):
    with pytest.raises(ValidationError):
        resolve_image_file(tmp_path / "missing.png")
    with pytest.raises(ValidationError):
        resolve_image_file(tmp_path)


def test_resolve_image_file_accepts_file_url(tmp_path):
    target = tmp_path / "a.png"
    target.write_bytes(b"")
    assert resolve_image_file(target.as_uri()) == target.resolve()


def test_resolve_directory_rejects_missing(tmp_path):
    assert resolve_directory(tmp_path) == tmp_path.resolve()
    with pytest.raises(ValidationError, match="Folder does not exist"):
        resolve_directory(tmp_path / "nope")
