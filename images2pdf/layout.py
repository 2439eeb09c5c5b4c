"""Page geometry: page sizes, margins and image placement in device pixels.

All rectangles use a top-left origin and are expressed in pixels at the
rendering resolution (300 dpi by default).
"""

from typing import Dict, Tuple

from reportlab.lib.pagesizes import A3, A4, A5, B5, ELEVENSEVENTEEN, LEGAL, LETTER

from .errors import LayoutError
from .models import PageSizeId, Rect

RENDER_DPI = 300
MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

# Portrait sizes in points.
PAGE_SIZES: Dict[PageSizeId, Tuple[float, float]] = {
    PageSizeId.A3: A3,
    PageSizeId.A4: A4,
    PageSizeId.A5: A5,
    PageSizeId.LETTER: LETTER,
    PageSizeId.LEGAL: LEGAL,
    PageSizeId.B5: B5,
    PageSizeId.TABLOID: ELEVENSEVENTEEN,
}


def page_size_points(page_size, landscape: bool = False) -> Tuple[float, float]:
    width, height = PAGE_SIZES[PageSizeId.parse(page_size)]
    if landscape:
        return float(height), float(width)
    return float(width), float(height)


def page_size_pixels(page_size, landscape: bool = False, dpi: int = RENDER_DPI) -> Tuple[int, int]:
    width, height = page_size_points(page_size, landscape)
    return int(round(width * dpi / POINTS_PER_INCH)), int(round(height * dpi / POINTS_PER_INCH))


def margin_to_pixels(margin_mm: float, dpi: int = RENDER_DPI) -> int:
    return max(0, int(round(margin_mm * dpi / MM_PER_INCH)))


def compute_usable_rect(page_size, margin_mm: float, landscape: bool = False, dpi: int = RENDER_DPI) -> Rect:
    """Page area left after subtracting ``margin_mm`` from all four sides.

    Raises LayoutError when the margin leaves no drawable width or height.
    """
    page_w, page_h = page_size_pixels(page_size, landscape, dpi)
    margin = margin_to_pixels(margin_mm, dpi)
    usable_w = page_w - 2 * margin
    usable_h = page_h - 2 * margin
    if usable_w <= 0 or usable_h <= 0:
        raise LayoutError(
            f"Margin of {margin_mm} mm is too large for {PageSizeId.parse(page_size).value} "
            f"({'landscape' if landscape else 'portrait'})"
        )
    return Rect(margin, margin, usable_w, usable_h)


def _scale_keep_aspect(src_w: int, src_h: int, dst_w: int, dst_h: int) -> Tuple[int, int]:
    # Integer arithmetic so the result never exceeds the destination box.
    scaled_w = dst_h * src_w // src_h
    if scaled_w <= dst_w:
        return scaled_w, dst_h
    return dst_w, dst_w * src_h // src_w


def compute_target_rect(usable: Rect, image_size: Tuple[int, int], stretch: bool) -> Rect:
    if stretch:
        return usable

    src_w, src_h = image_size
    if src_w <= 0 or src_h <= 0:
        return Rect(usable.x + usable.width // 2, usable.y + usable.height // 2, 0, 0)

    width, height = _scale_keep_aspect(src_w, src_h, usable.width, usable.height)
    x = usable.x + (usable.width - width) // 2
    y = usable.y + (usable.height - height) // 2
    return Rect(x, y, width, height)
