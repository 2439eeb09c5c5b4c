import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from .errors import EmptyResultError, Images2PdfError, ValidationError
from .paths import PathLike, canonical_path, has_supported_extension, resolve_directory

logger = logging.getLogger(__name__)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _log_walk_error(exc: OSError) -> None:
    logger.warning("Could not read %s: %s", exc.filename, exc.strerror)


def _iter_candidate_files(root: Path, recursive: bool) -> Iterator[Path]:
    if not recursive:
        with os.scandir(root) as entries:
            for entry in sorted(entries, key=lambda e: e.name):
                if not _is_hidden(entry.name):
                    yield Path(entry.path)
        return

    # Symlinked directories are listed in dirnames but not descended into.
    for current, dirnames, filenames in os.walk(root, onerror=_log_walk_error, followlinks=False):
        dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d))
        for name in sorted(filenames):
            if not _is_hidden(name):
                yield Path(current) / name


def collect_image_paths(root: PathLike, recursive: bool = True) -> Tuple[Path, ...]:
    """Return canonical paths of supported images under ``root``.

    Only direct children are visited when ``recursive`` is false. Paths that
    resolve to the same file are collapsed, keeping the first one found.
    """
    base = resolve_directory(root)
    seen = set()
    found: List[Path] = []
    try:
        for candidate in _iter_candidate_files(base, recursive):
            if not has_supported_extension(candidate) or not candidate.is_file():
                continue
            path = canonical_path(candidate)
            if path in seen:
                continue
            seen.add(path)
            found.append(path)
    except OSError as exc:
        raise ValidationError(f"Could not read folder {base}: {exc}") from exc
    return tuple(found)


@dataclass(frozen=True)
class ScanOutcome:
    root: str
    recursive: bool
    files: Tuple[Path, ...] = ()
    error: Optional[Images2PdfError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanTask:
    """One directory scan running on a background thread.

    The worker only produces a ScanOutcome; merging it into an image list is
    left to whoever receives ``on_finished``.
    """

    def __init__(
        self,
        root: PathLike,
        recursive: bool = True,
        on_finished: Optional[Callable[["ScanTask", ScanOutcome], None]] = None,
    ):
        self.root = str(root)
        self.recursive = recursive
        self._on_finished = on_finished
        self._outcome: Optional[ScanOutcome] = None
        self._done = threading.Event()
        self._thread = threading.Thread(target=self._run, name="images2pdf-scan", daemon=True)

    def start(self) -> "ScanTask":
        self._thread.start()
        return self

    def is_running(self) -> bool:
        return not self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[ScanOutcome]:
        self._done.wait(timeout)
        return self._outcome

    def result(self) -> ScanOutcome:
        if self._outcome is None:
            raise RuntimeError("Scan has not finished yet")
        return self._outcome

    def _run(self) -> None:
        logger.info("Scanning %s (recursive=%s)", self.root, self.recursive)
        try:
            files = collect_image_paths(self.root, self.recursive)
            if files:
                outcome = ScanOutcome(self.root, self.recursive, files)
            else:
                outcome = ScanOutcome(
                    self.root,
                    self.recursive,
                    error=EmptyResultError(f"No supported images found in {self.root}"),
                )
        except Images2PdfError as exc:
            outcome = ScanOutcome(self.root, self.recursive, error=exc)
        except Exception as exc:
            logger.exception("Unexpected error while scanning %s", self.root)
            outcome = ScanOutcome(
                self.root,
                self.recursive,
                error=ValidationError(f"Could not scan {self.root}: {exc}"),
            )
        logger.info("Scan of %s finished: %d file(s)", self.root, len(outcome.files))

        self._outcome = outcome
        try:
            if self._on_finished is not None:
                self._on_finished(self, outcome)
        finally:
            self._done.set()
