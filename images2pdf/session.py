import logging
import queue
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from .errors import BusyError, EmptyResultError, Images2PdfError, ValidationError
from .models import ConversionConfig, ConversionProgress, ConversionResult, ImageEntry, SortMode
from .ordering import describe, move_entry, sort_entries
from .paths import PathLike, resolve_directory, resolve_image_file
from .pipeline import ConversionPipeline, ConversionTask
from .scanner import ScanOutcome, ScanTask

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]

READY_STATUS = "Select the images to convert."


class Session:
    """Owns the image list and everything a front-end observes.

    Only the thread that owns the session mutates the list. Background scans
    and conversions post their results to an internal queue which the owner
    applies by calling ``process_events()`` (the Tk window does so from its
    ``after`` loop).

    Listeners registered with ``subscribe`` are called as ``listener(event,
    value)`` for the events ``status``, ``progress``, ``images``,
    ``sort_mode``, ``conversion_running``, ``scan_finished`` and
    ``conversion_finished``.
    """

    def __init__(self, pipeline: Optional[ConversionPipeline] = None, sort_mode: SortMode = SortMode.NAME_ASCENDING):
        self._images: List[ImageEntry] = []
        self._sort_mode = SortMode.parse(sort_mode)
        self._status_text = READY_STATUS
        self._progress = 0.0
        self._conversion_running = False

        self._pipeline = pipeline or ConversionPipeline()
        self._scan_task: Optional[ScanTask] = None
        self._conversion_task: Optional[ConversionTask] = None
        self._events: "queue.Queue[tuple]" = queue.Queue()
        self._listeners: List[Listener] = []

    # -- accessors ---------------------------------------------------------

    @property
    def images(self) -> Tuple[ImageEntry, ...]:
        return tuple(self._images)

    @property
    def image_paths(self) -> List[Path]:
        return [entry.path for entry in self._images]

    @property
    def image_count(self) -> int:
        return len(self._images)

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def sort_mode(self) -> SortMode:
        return self._sort_mode

    @property
    def scan_running(self) -> bool:
        return self._scan_task is not None

    @property
    def conversion_running(self) -> bool:
        return self._conversion_running or self._pipeline.running or self._conversion_task is not None

    # -- notification ------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, value: Any) -> None:
        for listener in list(self._listeners):
            listener(event, value)

    def _set_status(self, text: str) -> None:
        if text == self._status_text:
            return
        self._status_text = text
        logger.debug("Status: %s", text)
        self._emit("status", text)

    def _set_progress(self, value: float) -> None:
        clamped = min(1.0, max(0.0, float(value)))
        if abs(clamped - self._progress) < 0.00001:
            return
        self._progress = clamped
        self._emit("progress", clamped)

    def _set_conversion_running(self, running: bool) -> None:
        if running == self._conversion_running:
            return
        self._conversion_running = running
        self._emit("conversion_running", running)

    def _images_changed(self) -> None:
        self._emit("images", self.images)

    # -- ordering ----------------------------------------------------------

    def set_sort_mode(self, mode: Union[SortMode, str, int]) -> None:
        normalized = SortMode.parse(mode)
        if normalized != self._sort_mode:
            self._sort_mode = normalized
            self._emit("sort_mode", normalized)

        if normalized == SortMode.MANUAL:
            # Switching to manual keeps whatever order the list has now.
            self._set_status(describe(normalized))
            return

        if self._reorder():
            self._images_changed()
        self._set_status(describe(normalized))

    def _reorder(self) -> bool:
        if self._sort_mode == SortMode.MANUAL:
            return False
        ordered = sort_entries(self._images, self._sort_mode)
        if ordered == self._images:
            return False
        self._images = ordered
        return True

    # -- list editing ------------------------------------------------------

    def add_images(self, paths: Union[PathLike, Iterable[PathLike]]) -> int:
        """Append every acceptable path and return how many were added.

        Empty, non-local, missing, non-file and already present paths are
        skipped. The current sort mode is reapplied afterwards.
        """
        if isinstance(paths, (str, Path)):
            paths = [paths]

        present = {entry.path for entry in self._images}
        accepted: List[ImageEntry] = []
        for raw in paths:
            try:
                path = resolve_image_file(raw)
            except ValidationError as exc:
                logger.debug("Rejected %r: %s", raw, exc)
                continue
            if path in present:
                logger.debug("Already in the list: %s", path)
                continue
            present.add(path)
            accepted.append(ImageEntry(path))

        if not accepted:
            self._set_status("No new images were added.")
            return 0

        self._images.extend(accepted)
        self._reorder()
        self._images_changed()
        self._set_status(f"{len(self._images)} image(s) selected.")
        return len(accepted)

    def remove_image(self, index: int) -> bool:
        if not (0 <= index < len(self._images)):
            return False
        del self._images[index]
        self._images_changed()
        self._set_status(f"{len(self._images)} image(s) remaining.")
        return True

    def move_image(self, from_index: int, to_index: int) -> bool:
        moved = move_entry(self._images, from_index, to_index)
        if moved == self._images:
            return False
        self._images = moved
        self._images_changed()
        self._set_status("Image order updated.")
        return True

    def clear_images(self) -> None:
        if self._images:
            self._images = []
            self._images_changed()
        self._set_status("All images cleared.")

    # -- directory scanning ------------------------------------------------

    def add_directory(self, directory: PathLike, recursive: bool = True) -> ScanTask:
        """Start scanning ``directory`` in the background.

        The found files are added once ``process_events()`` (or
        ``wait_for_scan()``) picks up the result.
        """
        if self.scan_running:
            self._set_status("Still reading a folder, please wait…")
            raise BusyError("A folder scan is already running")
        try:
            root = resolve_directory(directory)
        except ValidationError as exc:
            self._set_status(str(exc))
            raise

        self._set_status("Scanning folder…")
        task = ScanTask(root, recursive, on_finished=self._post_scan_finished)
        self._scan_task = task
        task.start()
        return task

    def _post_scan_finished(self, task: ScanTask, outcome: ScanOutcome) -> None:
        # Called on the scan thread: hand over, never touch the list here.
        self._events.put(("scan_finished", task, outcome))

    def _merge_scan(self, task: ScanTask, outcome: ScanOutcome) -> None:
        if task is self._scan_task:
            self._scan_task = None

        if isinstance(outcome.error, EmptyResultError):
            logger.info("No supported images in %s", outcome.root)
            self._set_status("No supported images were found in that folder.")
        elif outcome.error is not None:
            logger.error("Scan of %s failed: %s", outcome.root, outcome.error)
            self._set_status(str(outcome.error))
        else:
            self.add_images(outcome.files)
        self._emit("scan_finished", outcome)

    def wait_for_scan(self, timeout: Optional[float] = None) -> Optional[ScanOutcome]:
        task = self._scan_task
        if task is None:
            return None
        outcome = task.wait(timeout)
        self.process_events()
        return outcome

    # -- conversion --------------------------------------------------------

    def _reject_if_busy(self) -> None:
        # The running conversion keeps its status text.
        if self.conversion_running:
            logger.warning("Conversion request rejected: a conversion is already running")
            raise BusyError("A conversion is already running")

    def _apply_progress(self, progress: ConversionProgress) -> None:
        self._set_conversion_running(True)
        self._set_status(progress.message)
        self._set_progress(progress.fraction)

    def _report_failure(self, exc: Images2PdfError) -> None:
        logger.error("Conversion failed: %s", exc)
        self._set_status(str(exc))

    def convert(self, config: ConversionConfig) -> ConversionResult:
        """Convert the current list synchronously, notifying listeners per page.

        Errors update the status text and are re-raised.
        """
        self._reject_if_busy()
        entries = tuple(self._images)
        try:
            result = self._pipeline.convert(entries, config, progress=self._apply_progress)
        except Images2PdfError as exc:
            self._report_failure(exc)
            raise
        finally:
            self._set_conversion_running(False)
            self._set_progress(0.0)

        self._set_status(result.summary())
        self._emit("conversion_finished", result)
        return result

    def start_conversion(self, config: ConversionConfig) -> ConversionTask:
        """Convert the current list on a background thread."""
        self._reject_if_busy()
        if not self._images:
            exc = EmptyResultError("No images to convert")
            self._report_failure(exc)
            raise exc

        task = ConversionTask(
            self._pipeline,
            tuple(self._images),
            config,
            on_progress=lambda progress: self._events.put(("conversion_progress", progress)),
            on_finished=lambda finished, result: self._events.put(("conversion_finished", finished, result)),
        )
        self._conversion_task = task
        self._set_conversion_running(True)
        self._set_progress(0.0)
        self._set_status("Converting…")
        task.start()
        return task

    def _finish_conversion(self, task: ConversionTask, result: ConversionResult) -> None:
        if task is self._conversion_task:
            self._conversion_task = None
        self._set_conversion_running(False)
        self._set_progress(0.0)
        self._set_status(result.summary())
        self._emit("conversion_finished", result)

    def wait_for_conversion(self, timeout: Optional[float] = None) -> Optional[ConversionResult]:
        task = self._conversion_task
        if task is None:
            return None
        result = task.wait(timeout)
        self.process_events()
        return result

    # -- event pump --------------------------------------------------------

    def process_events(self) -> int:
        """Apply everything background tasks have posted; returns the count."""
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            handled += 1
            kind = event[0]
            if kind == "scan_finished":
                self._merge_scan(event[1], event[2])
            elif kind == "conversion_progress":
                self._apply_progress(event[1])
            elif kind == "conversion_finished":
                self._finish_conversion(event[1], event[2])
        return handled
