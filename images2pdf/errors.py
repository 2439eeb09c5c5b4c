from pathlib import Path
from typing import Optional, Sequence


class Images2PdfError(Exception):
    pass


class ValidationError(Images2PdfError):
    pass


class BusyError(Images2PdfError):
    pass


class LayoutError(Images2PdfError):
    pass


class WriteError(Images2PdfError):
    pass


class DecodeError(Images2PdfError):
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class EmptyResultError(Images2PdfError):
    def __init__(self, message: str, failed_files: Sequence[str] = ()):
        super().__init__(message)
        self.failed_files = list(failed_files)
