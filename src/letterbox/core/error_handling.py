# src/letterbox/core/error_handling.py

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Type

from .exceptions import ItemProcessingError, LetterboxError
from .models import ItemResult, ItemStatus
from .protocols import LoggerProtocol


@contextmanager
def stage_errors(
    error_cls: Type[ItemProcessingError], item_id: str, stage: str
) -> Iterator[None]:
    """
    Convert any exception raised inside one pipeline stage into ``error_cls``.

    Errors that are already part of the letterbox hierarchy pass through
    unchanged so an inner stage keeps its classification.
    """
    try:
        yield
    except LetterboxError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise error_cls(f"{stage}: {exc}", item_id=item_id, cause=exc) from exc


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize outcomes.
    """

    def __init__(
        self,
        operation_name: str = "Batch Operation",
        logger: Optional[LoggerProtocol] = None,
    ):
        self.operation_name = operation_name
        self.results: List[ItemResult] = []
        self.logger = logger or logging.getLogger(
            self.__class__.__module__ + "." + self.__class__.__name__
        )

    def __enter__(self) -> "BatchOperationContextManager":
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        failed = [r for r in self.results if not r.success]
        processed = self.count(ItemStatus.PROCESSED)
        skipped = self.count(ItemStatus.SKIPPED)

        if failed:
            self.logger.warning(
                f"{self.operation_name} finished with {len(failed)} failed item(s)."
            )
            for i, result in enumerate(failed):
                self.logger.error(
                    f"  Error {i + 1}/{len(failed)} for item '{result.item_id}': {result.error}"
                )
        elif exc_type:
            self.logger.warning(f"{self.operation_name} stopped: {exc_val}")
        else:
            self.logger.info(
                f"{self.operation_name} completed successfully: "
                f"{processed} processed, {skipped} unmodified."
            )

        # never suppress
        return False

    def add_result(self, result: ItemResult) -> None:
        """Record the outcome of one item. Not thread-safe; guard externally."""
        self.results.append(result)
        if not result.success:
            self.logger.debug(
                f"Error added for item '{result.item_id}' in {self.operation_name}: {result.error}"
            )

    def count(self, status: ItemStatus) -> int:
        return sum(1 for r in self.results if r.success and r.status is status)
