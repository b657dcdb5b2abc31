"""Core components for letterbox batch processing."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    LetterboxError,
    ConfigurationError,
    CancellationError,
    ItemProcessingError,
    SourceReadError,
    DecodeError,
    EncodeError,
    DestinationWriteError,
)
from .geometry import AspectRatio, Layout, Rect, compute_layout, parse_aspect
from .models import BatchConfig, BatchReport, FileInfo, ItemResult, ItemStatus
from .codec import PillowCodec
from .filesystem import LocalFileSystem, calculate_dest_path
from .transform import LetterboxTransform, should_skip
from .coordinator import AdmissionGate, BatchCoordinator, run_batch

__all__ = [
    "BatchConfig",
    "BatchReport",
    "FileInfo",
    "ItemResult",
    "ItemStatus",
    "AspectRatio",
    "Layout",
    "Rect",
    "compute_layout",
    "parse_aspect",
    "PillowCodec",
    "LocalFileSystem",
    "calculate_dest_path",
    "LetterboxTransform",
    "should_skip",
    "AdmissionGate",
    "BatchCoordinator",
    "run_batch",
    "setup_logger",
    "get_logger",
    "LetterboxError",
    "ConfigurationError",
    "CancellationError",
    "ItemProcessingError",
    "SourceReadError",
    "DecodeError",
    "EncodeError",
    "DestinationWriteError",
]
