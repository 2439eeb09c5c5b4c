import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .errors import Images2PdfError, ValidationError
from .layout import PAGE_SIZES
from .models import MARGIN_MM_MAX, ConversionConfig, SortMode
from .paths import to_local_path
from .session import Session

logger = logging.getLogger(__name__)

_SORT_CHOICES = {
    "manual": SortMode.MANUAL,
    "name": SortMode.NAME_ASCENDING,
    "name-desc": SortMode.NAME_DESCENDING,
    "newest": SortMode.TIME_NEWEST_FIRST,
    "oldest": SortMode.TIME_OLDEST_FIRST,
}


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="images2pdf",
        description="Combine images into a single PDF, one image per page.",
    )
    ap.add_argument("inputs", nargs="+", help="Image files and/or folders (file:// URLs accepted)")
    ap.add_argument("-o", "--output", required=True, help="Output PDF file")
    ap.add_argument("--margin", type=int, default=10, help=f"Margin in millimetres, 0–{MARGIN_MM_MAX} (default: 10)")
    ap.add_argument(
        "--page-size",
        default="A4",
        type=str.upper,
        choices=[size.value for size in PAGE_SIZES],
        help="Page size (default: A4)",
    )
    ap.add_argument("--landscape", action="store_true", help="Landscape orientation")
    ap.add_argument("--stretch", action="store_true", help="Stretch images to fill the page, ignoring aspect ratio")
    ap.add_argument("--grayscale", action="store_true", help="Convert images to grayscale")
    ap.add_argument("--no-auto-rotate", dest="auto_rotate", action="store_false", help="Ignore EXIF orientation")
    ap.add_argument("--sort", default="name", choices=list(_SORT_CHOICES), help="Page order (default: name)")
    ap.add_argument(
        "--no-recursive",
        dest="recursive",
        action="store_false",
        help="Only take images directly inside the given folders",
    )
    ap.add_argument("--title", default="", help="PDF title metadata")
    ap.add_argument("--author", default="", help="PDF author metadata")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def _is_directory(raw: str) -> bool:
    try:
        return to_local_path(raw).is_dir()
    except ValidationError:
        return False


def _add_files(session: Session, files: Sequence[str]) -> None:
    if not files:
        return
    added = session.add_images(files)
    if added < len(files):
        logger.warning("%d input(s) were not added (missing, not a file, or duplicate)", len(files) - added)


def _collect_inputs(session: Session, inputs: Sequence[str], recursive: bool) -> None:
    # Consecutive files are added as one batch, flushed before each folder so
    # the list follows the command-line order.
    files: List[str] = []
    for raw in inputs:
        if _is_directory(raw):
            _add_files(session, files)
            files = []
            session.add_directory(raw, recursive=recursive)
            session.wait_for_scan()
        else:
            files.append(raw)
    _add_files(session, files)


def _log_event(event: str, value) -> None:
    if event == "status":
        logger.info(value)
    elif event == "progress" and value > 0:
        logger.debug("Progress: %.0f%%", value * 100)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    session = Session(sort_mode=_SORT_CHOICES[args.sort])
    session.subscribe(_log_event)

    try:
        _collect_inputs(session, args.inputs, args.recursive)
        config = ConversionConfig(
            output_path=args.output,
            margin_mm=args.margin,
            stretch_to_page=args.stretch,
            page_size=args.page_size,
            landscape=args.landscape,
            grayscale=args.grayscale,
            auto_rotate=args.auto_rotate,
            title=args.title,
            author=args.author,
        )
        result = session.convert(config)
    except Images2PdfError as exc:
        logger.error("%s", exc)
        return 1

    if result.failed_files:
        logger.warning("Skipped %d file(s): %s", len(result.failed_files), ", ".join(result.failed_files))
    return 0


if __name__ == "__main__":
    sys.exit(main())
