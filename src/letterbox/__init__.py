"""Batch letterboxing of photographs with bounded concurrency."""

__version__ = "0.1.0"

from .core import (  # noqa: E402
    BatchConfig,
    BatchReport,
    CancellationError,
    ConfigurationError,
    DecodeError,
    DestinationWriteError,
    EncodeError,
    ItemProcessingError,
    LetterboxError,
    SourceReadError,
    compute_layout,
    run_batch,
)
from .process_images import process_batch  # noqa: E402

__all__ = [
    "__version__",
    "BatchConfig",
    "BatchReport",
    "process_batch",
    "run_batch",
    "compute_layout",
    "LetterboxError",
    "ConfigurationError",
    "CancellationError",
    "ItemProcessingError",
    "SourceReadError",
    "DecodeError",
    "EncodeError",
    "DestinationWriteError",
]
