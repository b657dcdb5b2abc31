"""Protocol definitions for dependency injection and testability."""

from typing import Any, Callable, Optional, Protocol, Tuple

from .geometry import Rect
from .models import FileInfo, ItemStatus

Color = Tuple[int, int, int]

# Invoked once per item from worker threads; raises on failure.
Transform = Callable[[str], Optional[ItemStatus]]


class ImageCodecProtocol(Protocol):
    """Protocol for decode, draw and encode primitives."""

    def decode(self, data: bytes) -> Any:
        """Decode image bytes into a raster image."""
        ...

    def size(self, image: Any) -> Tuple[int, int]:
        """Return ``(width, height)`` of a raster image."""
        ...

    def new_canvas(self, width: int, height: int) -> Any:
        """Create an empty raster image."""
        ...

    def fill(self, canvas: Any, rect: Rect, color: Color) -> None:
        """Fill ``rect`` of ``canvas`` with a solid color."""
        ...

    def composite(self, canvas: Any, image: Any, rect: Rect) -> None:
        """Draw ``image`` into ``rect`` of ``canvas``, overwriting what is there."""
        ...

    def encode(self, image: Any, quality: int) -> bytes:
        """Encode a raster image at the given quality."""
        ...


class FileSystemProtocol(Protocol):
    """Protocol for the filesystem operations the transform needs."""

    def stat(self, path: str) -> FileInfo:
        """Probe a path; missing paths report ``exists=False``."""
        ...

    def read_all(self, path: str) -> bytes:
        """Read a whole file."""
        ...

    def write_all(self, path: str, data: bytes) -> None:
        """Write a whole file, replacing existing content."""
        ...

    def ensure_dir(self, path: str) -> None:
        """Create a directory and its parents if missing."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
