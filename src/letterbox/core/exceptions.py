"""Custom exceptions for letterbox batch processing."""

from __future__ import annotations

from typing import Optional


class LetterboxError(Exception):
    """Base exception for all letterbox errors."""


class ConfigurationError(LetterboxError):
    """Error raised for invalid configuration options."""


class CancellationError(LetterboxError):
    """Error raised when a cancel signal stopped the batch from admitting items."""

    def __init__(self, message: str = "Batch cancelled", pending: int = 0):
        super().__init__(message)
        self.pending = pending


class ItemProcessingError(LetterboxError):
    """Error raised when processing a single item fails.

    Carries the identifier of the failing item and the underlying cause.
    """

    kind = "processing"

    def __init__(
        self,
        message: str,
        item_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.item_id = item_id
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.item_id is None:
            return message
        return f"{self.item_id}: {message}"


class SourceReadError(ItemProcessingError):
    """The source could not be read."""

    kind = "source_read"


class DecodeError(ItemProcessingError):
    """The source bytes are corrupt or in an unsupported format."""

    kind = "decode"


class EncodeError(ItemProcessingError):
    """The output canvas could not be encoded."""

    kind = "encode"


class DestinationWriteError(ItemProcessingError):
    """The output could not be written to its destination."""

    kind = "destination_write"
