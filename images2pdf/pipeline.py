import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .errors import DecodeError, EmptyResultError, Images2PdfError
from .imaging import decode_image, to_grayscale
from .layout import RENDER_DPI, compute_target_rect, compute_usable_rect, page_size_points
from .models import ConversionConfig, ConversionProgress, ConversionResult, ImageEntry, Outcome
from .paths import to_local_path
from .singleflight import SingleFlight
from .writer import PdfDocumentWriter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ConversionProgress], None]


class ConversionPipeline:
    """Renders an ordered list of images into one PDF, one image per page.

    Undecodable files are skipped and reported in the result; anything that
    prevents the document itself from being written aborts the run. Only one
    ``convert`` call may be active at a time.
    """

    def __init__(self, dpi: int = RENDER_DPI, decoder=decode_image, writer_factory=PdfDocumentWriter):
        self.dpi = dpi
        self._decoder = decoder
        self._writer_factory = writer_factory
        self._flight = SingleFlight("conversion")

    @property
    def running(self) -> bool:
        return self._flight.active

    def convert(
        self,
        entries: Sequence[ImageEntry],
        config: ConversionConfig,
        progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        with self._flight.hold():
            return self._convert(list(entries), config, progress)

    def _report(self, progress: Optional[ProgressCallback], index: int, total: int, name: str, pages: int) -> None:
        if progress is not None:
            progress(ConversionProgress(index, total, name, pages / max(1, total)))

    def _convert(
        self,
        entries: List[ImageEntry],
        config: ConversionConfig,
        progress: Optional[ProgressCallback],
    ) -> ConversionResult:
        if not entries:
            raise EmptyResultError("No images to convert")

        output_path = Path(os.path.abspath(to_local_path(config.output_path)))
        # Fail on an impossible margin before anything touches the disk.
        compute_usable_rect(config.page_size, config.margin_mm, config.landscape, self.dpi)

        writer = self._writer_factory(
            output_path,
            page_size_points(config.page_size, config.landscape),
            self.dpi,
            config.title,
            config.author,
        )

        total = len(entries)
        pages = 0
        failed: List[str] = []
        logger.info("Converting %d image(s) to %s", total, output_path)

        with writer:
            for index, entry in enumerate(entries, start=1):
                self._report(progress, index, total, entry.name, pages)
                try:
                    image = self._decoder(entry.path, config.auto_rotate)
                except DecodeError as exc:
                    logger.warning("Skipping %s: %s", entry.name, exc)
                    failed.append(entry.name)
                    continue

                drawn = to_grayscale(image) if config.grayscale else image
                try:
                    if pages > 0:
                        writer.new_page()
                    usable = compute_usable_rect(config.page_size, config.margin_mm, config.landscape, self.dpi)
                    target = compute_target_rect(usable, drawn.size, config.stretch_to_page)
                    writer.draw_image(drawn, target)
                finally:
                    if drawn is not image:
                        drawn.close()
                    image.close()

                pages += 1
                self._report(progress, index, total, entry.name, pages)

            if pages == 0:
                raise EmptyResultError("No images were written", failed)
            writer.finish()

        outcome = Outcome.PARTIAL if failed else Outcome.SUCCESS
        logger.info("Wrote %d page(s) to %s (%d skipped)", pages, output_path, len(failed))
        return ConversionResult(pages, failed, outcome, output_path)


def result_from_error(exc: Exception) -> ConversionResult:
    if isinstance(exc, EmptyResultError):
        return ConversionResult(0, list(exc.failed_files), Outcome.EMPTY, error=exc)
    return ConversionResult(0, [], Outcome.ERROR, error=exc)


class ConversionTask:
    """Runs ``ConversionPipeline.convert`` on a background thread.

    Every outcome, including failures, is delivered as a ConversionResult.
    """

    def __init__(
        self,
        pipeline: ConversionPipeline,
        entries: Sequence[ImageEntry],
        config: ConversionConfig,
        on_progress: Optional[ProgressCallback] = None,
        on_finished: Optional[Callable[["ConversionTask", ConversionResult], None]] = None,
    ):
        self._pipeline = pipeline
        self._entries = tuple(entries)
        self.config = config
        self._on_progress = on_progress
        self._on_finished = on_finished
        self._result: Optional[ConversionResult] = None
        self._done = threading.Event()
        self._thread = threading.Thread(target=self._run, name="images2pdf-convert", daemon=True)

    def start(self) -> "ConversionTask":
        self._thread.start()
        return self

    def is_running(self) -> bool:
        return not self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[ConversionResult]:
        self._done.wait(timeout)
        return self._result

    def result(self) -> ConversionResult:
        if self._result is None:
            raise RuntimeError("Conversion has not finished yet")
        return self._result

    def _run(self) -> None:
        try:
            result = self._pipeline.convert(self._entries, self.config, self._on_progress)
        except Images2PdfError as exc:
            logger.error("Conversion failed: %s", exc)
            result = result_from_error(exc)
        except Exception as exc:
            logger.exception("Unexpected error during conversion")
            result = result_from_error(exc)

        self._result = result
        try:
            if self._on_finished is not None:
                self._on_finished(self, result)
        finally:
            self._done.set()
