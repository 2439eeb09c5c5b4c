import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple

MARGIN_MM_MIN = 0
MARGIN_MM_MAX = 50


class SortMode(Enum):
    MANUAL = 0
    NAME_ASCENDING = 1
    NAME_DESCENDING = 2
    TIME_NEWEST_FIRST = 3
    TIME_OLDEST_FIRST = 4

    @classmethod
    def parse(cls, value: Any) -> "SortMode":
        # Unknown values fall back to manual ordering rather than raising.
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key in cls.__members__:
                return cls[key]
            value = int(key) if key.isdigit() else None
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.MANUAL


class PageSizeId(Enum):
    A3 = "A3"
    A4 = "A4"
    A5 = "A5"
    LETTER = "LETTER"
    LEGAL = "LEGAL"
    B5 = "B5"
    TABLOID = "TABLOID"

    @classmethod
    def parse(cls, value: Any) -> "PageSizeId":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        if key in cls.__members__:
            return cls[key]
        return cls.A4


class Outcome(Enum):
    SUCCESS = "success"
    PARTIAL = "partial"  # succeeded with skipped files
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class ImageEntry:
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def modified_ns(self) -> int:
        try:
            return os.stat(self.path).st_mtime_ns
        except OSError:
            return 0

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def clamp_margin(value: Any) -> int:
    try:
        margin = int(value)
    except (TypeError, ValueError):
        margin = MARGIN_MM_MIN
    return min(MARGIN_MM_MAX, max(MARGIN_MM_MIN, margin))


@dataclass(frozen=True)
class ConversionConfig:
    output_path: str
    margin_mm: int = 10
    stretch_to_page: bool = False
    page_size: PageSizeId = PageSizeId.A4
    landscape: bool = False
    grayscale: bool = False

    auto_rotate: bool = True
    title: str = ""
    author: str = ""

    def __post_init__(self) -> None:
        # Frozen: normalise through object.__setattr__ so every instance is already clamped.
        object.__setattr__(self, "output_path", str(self.output_path))
        object.__setattr__(self, "margin_mm", clamp_margin(self.margin_mm))
        object.__setattr__(self, "page_size", PageSizeId.parse(self.page_size))


@dataclass(frozen=True)
class ConversionProgress:
    index: int
    total: int
    file_name: str
    fraction: float

    @property
    def message(self) -> str:
        return f"Processing {self.index}/{max(1, self.total)}: {self.file_name}"


@dataclass
class ConversionResult:
    pages_written: int = 0
    failed_files: List[str] = field(default_factory=list)
    outcome: Outcome = Outcome.SUCCESS
    output_path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.SUCCESS, Outcome.PARTIAL)

    def summary(self) -> str:
        if self.outcome == Outcome.PARTIAL:
            return f"Finished, but skipped {len(self.failed_files)} file(s): {', '.join(self.failed_files)}"
        if self.outcome == Outcome.SUCCESS:
            target = self.output_path.name if self.output_path else "PDF"
            return f"Saved {self.pages_written} image(s) to {target}"
        if self.error is not None:
            return str(self.error)
        return "No output written."
