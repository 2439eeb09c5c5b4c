import os

import pytest

from images2pdf.errors import EmptyResultError, ValidationError
from images2pdf.scanner import ScanTask, collect_image_paths

from .conftest import make_image


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "album"
    make_image(root / "a.png")
    make_image(root / "B.JPG")
    (root / "notes.txt").write_text("not an image")
    make_image(root / ".hidden.png")
    make_image(root / "sub" / "c.webp")
    make_image(root / "sub" / "deeper" / "d.tif")
    make_image(root / ".cache" / "thumb.png")
    return root


def names(paths):
    return sorted(path.name for path in paths)


def test_recursive_scan_finds_nested_images(tree):
    assert names(collect_image_paths(tree)) == ["B.JPG", "a.png", "c.webp", "d.tif"]


def test_flat_scan_only_reads_direct_children(tree):
    assert names(collect_image_paths(tree, recursive=False)) == ["B.JPG", "a.png"]


def test_scan_returns_canonical_paths(tree):
    for path in collect_image_paths(tree / "sub" / ".."):
        assert path.is_absolute()
        assert ".." not in path.parts


def test_symlinked_duplicates_are_collapsed(tmp_path):
    root = tmp_path / "links"
    original = make_image(root / "a.png")
    try:
        os.symlink(original, root / "z_link.png")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable")
    assert collect_image_paths(root) == (original.resolve(),)


def test_symlinked_directories_are_not_followed(tmp_path):
    root = tmp_path / "root"
    make_image(root / "a.png")
    outside = tmp_path / "outside"
    make_image(outside / "far.png")
    try:
        os.symlink(outside, root / "linked", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable")
    assert names(collect_image_paths(root)) == ["a.png"]


def test_missing_folder_raises_validation_error(tmp_path):
    with pytest.raises(ValidationError):
        collect_image_paths(tmp_path / "missing")


def test_scan_task_reports_files(tree):
    received = []
    task = ScanTask(tree, recursive=False, on_finished=lambda t, outcome: received.append((t, outcome)))
    outcome = task.start().wait(5)

    assert outcome.ok
    assert names(outcome.files) == ["B.JPG", "a.png"]
    assert received == [(task, outcome)]
    assert not task.is_running()
    assert task.result() is outcome


def test_scan_task_with_no_images_reports_empty_result(tmp_path):
    (tmp_path / "readme.txt").write_text("hello")
    outcome = ScanTask(tmp_path).start().wait(5)
    assert not outcome.ok
    assert isinstance(outcome.error, EmptyResultError)
    assert outcome.files == ()


def test_scan_task_with_missing_folder_reports_validation_error(tmp_path):
    outcome = ScanTask(tmp_path / "missing").start().wait(5)
    assert isinstance(outcome.error, ValidationError)


def test_result_before_finish_raises(tmp_path):
    with pytest.raises(RuntimeError):
        ScanTask(tmp_path).result()
