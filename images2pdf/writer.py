import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .errors import WriteError
from .layout import POINTS_PER_INCH, RENDER_DPI
from .models import Rect

logger = logging.getLogger(__name__)


def _ensure_parent_dir(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Could not create output folder {path.parent}: {exc}") from exc


class PdfDocumentWriter:
    """Multi-page PDF built on a reportlab canvas.

    Pages are written to a ``.part`` file next to the target and moved into
    place by ``finish()``; ``abort()`` removes it, so a failed run never
    leaves a truncated PDF behind or clobbers an existing one.
    Drawing rectangles are given in pixels at ``dpi`` with a top-left origin.
    """

    def __init__(
        self,
        output_path: Path,
        page_size: Tuple[float, float],
        dpi: int = RENDER_DPI,
        title: str = "",
        author: str = "",
    ):
        self.output_path = Path(output_path)
        if self.output_path.is_dir():
            raise WriteError(f"Output path is a folder: {self.output_path}")
        _ensure_parent_dir(self.output_path)

        self._page_w, self._page_h = page_size
        self._scale = POINTS_PER_INCH / float(dpi)
        self._part_path = self.output_path.with_name(f".{self.output_path.name}.part")
        try:
            self._stream = open(self._part_path, "wb")
        except OSError as exc:
            raise WriteError(f"Could not create PDF file {self.output_path}: {exc}") from exc

        self._closed = False
        try:
            self._canvas = canvas.Canvas(self._stream, pagesize=(self._page_w, self._page_h), pageCompression=1)
            if title:
                self._canvas.setTitle(title)
            if author:
                self._canvas.setAuthor(author)
        except Exception as exc:
            self.abort()
            raise WriteError(f"Could not start PDF {self.output_path}: {exc}") from exc

    def new_page(self) -> None:
        try:
            self._canvas.showPage()
            self._canvas.setPageSize((self._page_w, self._page_h))
        except Exception as exc:
            raise WriteError(f"Could not create PDF page: {exc}") from exc

    def draw_image(self, image: Image.Image, rect: Rect) -> None:
        width = rect.width * self._scale
        height = rect.height * self._scale
        x = rect.x * self._scale
        # reportlab measures y from the bottom edge.
        y = self._page_h - rect.y * self._scale - height
        try:
            self._canvas.drawImage(ImageReader(image), x, y, width=width, height=height)
        except Exception as exc:
            raise WriteError(f"Could not draw image: {exc}") from exc

    def finish(self) -> Path:
        try:
            self._canvas.showPage()
            self._canvas.save()
            self._stream.close()
            os.replace(self._part_path, self.output_path)
        except Exception as exc:
            self.abort()
            raise WriteError(f"Could not write PDF {self.output_path}: {exc}") from exc
        self._closed = True
        logger.debug("Wrote %s", self.output_path)
        return self.output_path

    def abort(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream.close()
        try:
            self._part_path.unlink()
        except FileNotFoundError:
            pass

    def __enter__(self) -> "PdfDocumentWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        if exc_type is not None:
            self.abort()
        return None
