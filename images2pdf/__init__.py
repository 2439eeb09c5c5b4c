"""Combine images into a single PDF, one image per page."""

from importlib.metadata import PackageNotFoundError, version

from .errors import (
    BusyError,
    DecodeError,
    EmptyResultError,
    Images2PdfError,
    LayoutError,
    ValidationError,
    WriteError,
)
from .layout import RENDER_DPI, compute_target_rect, compute_usable_rect
from .models import (
    ConversionConfig,
    ConversionProgress,
    ConversionResult,
    ImageEntry,
    Outcome,
    PageSizeId,
    Rect,
    SortMode,
)
from .ordering import move_entry, sort_entries
from .pipeline import ConversionPipeline, ConversionTask
from .scanner import ScanOutcome, ScanTask, collect_image_paths
from .session import Session

try:
    __version__ = version("images2pdf")
except PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = [
    "BusyError",
    "DecodeError",
    "EmptyResultError",
    "Images2PdfError",
    "LayoutError",
    "ValidationError",
    "WriteError",
    "RENDER_DPI",
    "compute_target_rect",
    "compute_usable_rect",
    "ConversionConfig",
    "ConversionProgress",
    "ConversionResult",
    "ImageEntry",
    "Outcome",
    "PageSizeId",
    "Rect",
    "SortMode",
    "move_entry",
    "sort_entries",
    "ConversionPipeline",
    "ConversionTask",
    "ScanOutcome",
    "ScanTask",
    "collect_image_paths",
    "Session",
]
