import pytest

from images2pdf.errors import LayoutError
from images2pdf.layout import (
    PAGE_SIZES,
    compute_target_rect,
    compute_usable_rect,
    margin_to_pixels,
    page_size_pixels,
    page_size_points,
)
from images2pdf.models import ConversionConfig, PageSizeId, Rect, clamp_margin


def test_a4_at_300_dpi():
    assert page_size_pixels(PageSizeId.A4) == (2480, 3508)


def test_landscape_swaps_dimensions():
    width, height = page_size_points(PageSizeId.LETTER)
    assert (width, height) == (612.0, 792.0)
    assert page_size_points(PageSizeId.LETTER, landscape=True) == (792.0, 612.0)


def test_every_page_size_is_portrait():
    for page_size in PAGE_SIZES:
        width, height = page_size_points(page_size)
        assert 0 < width < height


def test_margin_conversion():
    assert margin_to_pixels(0) == 0
    assert margin_to_pixels(10) == 118
    assert margin_to_pixels(25.4) == 300


def test_usable_rect_a4_ten_mm():
    usable = compute_usable_rect(PageSizeId.A4, 10)
    assert usable == Rect(118, 118, 2480 - 236, 3508 - 236)
    assert not usable.is_empty


def test_usable_rect_without_margin_is_whole_page():
    assert compute_usable_rect(PageSizeId.A5, 0, landscape=True).size == page_size_pixels(PageSizeId.A5, True)


@pytest.mark.parametrize("page_size", list(PageSizeId))
@pytest.mark.parametrize("landscape", [False, True])
def test_largest_allowed_margin_fits_every_page(page_size, landscape):
    assert not compute_usable_rect(page_size, 50, landscape).is_empty


def test_oversized_margin_raises_layout_error():
    # A5 is 148 mm wide, so 75 mm on each side leaves nothing.
    with pytest.raises(LayoutError):
        compute_usable_rect(PageSizeId.A5, 75)


def test_stretch_fills_usable_rect():
    usable = Rect(10, 20, 300, 400)
    assert compute_target_rect(usable, (50, 10), stretch=True) == usable


def test_fit_centres_horizontally_for_tall_images():
    usable = Rect(0, 0, 200, 100)
    assert compute_target_rect(usable, (100, 100), stretch=False) == Rect(50, 0, 100, 100)


def test_fit_centres_vertically_for_wide_images():
    usable = Rect(0, 0, 200, 100)
    assert compute_target_rect(usable, (400, 100), stretch=False) == Rect(0, 25, 200, 50)


def test_fit_respects_usable_offset():
    usable = Rect(118, 118, 2244, 3272)
    target = compute_target_rect(usable, (4000, 3000), stretch=False)
    assert target.width == 2244
    assert target.height == 2244 * 3000 // 4000
    assert target.x == 118
    assert target.y == 118 + (3272 - target.height) // 2


@pytest.mark.parametrize("image_size", [(1, 5000), (5000, 1), (37, 91), (2244, 3272)])
def test_fit_never_exceeds_usable_rect(image_size):
    usable = Rect(118, 118, 2244, 3272)
    target = compute_target_rect(usable, image_size, stretch=False)
    assert usable.x <= target.x
    assert usable.y <= target.y
    assert target.x + target.width <= usable.x + usable.width
    assert target.y + target.height <= usable.y + usable.height


def test_degenerate_image_size_gives_empty_rect():
    target = compute_target_rect(Rect(0, 0, 100, 100), (0, 10), stretch=False)
    assert target.is_empty


@pytest.mark.parametrize("raw,expected", [(-5, 0), (0, 0), (12, 12), (50, 50), (999, 50), ("7", 7), ("x", 0)])
def test_clamp_margin(raw, expected):
    assert clamp_margin(raw) == expected


def test_config_normalises_values(tmp_path):
    config = ConversionConfig(output_path=tmp_path / "a.pdf", margin_mm=999, page_size="letter")
    assert config.margin_mm == 50
    assert config.page_size == PageSizeId.LETTER
    assert isinstance(config.output_path, str)


def test_unknown_page_size_falls_back_to_a4():
    assert PageSizeId.parse("folio") == PageSizeId.A4
    assert PageSizeId.parse(None) == PageSizeId.A4
