"""
Batch letterboxing entry points.

Source images → staleness check → decode → letterbox → JPEG encode → output
directory, spread over a bounded pool of worker threads.
"""

import logging
import os
import threading
import time
from typing import List, Optional, Sequence

from .core import BatchConfig, BatchReport, LetterboxTransform
from .core.coordinator import BatchCoordinator
from .core.observability import MetricsCollector, StructuredLogger
from .core.protocols import FileSystemProtocol, ImageCodecProtocol, LoggerProtocol

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".tif", ".tiff")


def process_batch(
    items: Sequence[str],
    config: BatchConfig,
    cancel_event: Optional[threading.Event] = None,
    codec: Optional[ImageCodecProtocol] = None,
    filesystem: Optional[FileSystemProtocol] = None,
    logger: Optional[LoggerProtocol] = None,
    metrics_collector: Optional[MetricsCollector] = None,
) -> BatchReport:
    """
    Letterbox every source image in ``items`` according to ``config``.

    Args:
        items: Source image paths; each must map to its own destination
        config: Validated batch configuration
        cancel_event: Optional event that stops further items from starting
        codec: Image codec (defaults to Pillow)
        filesystem: Filesystem access (defaults to the local filesystem)
        logger: Logger shared by the coordinator and the transform
        metrics_collector: Optional per-item timing collector

    Returns:
        BatchReport with processed and unmodified items

    Raises:
        ItemProcessingError: First item that failed, after running items finish
        CancellationError: The batch was cancelled before every item started
    """
    logger = logger or StructuredLogger("letterbox")
    transform = LetterboxTransform(
        config, codec=codec, filesystem=filesystem, logger=logger
    )
    coordinator = BatchCoordinator(
        config.concurrency, logger=logger, metrics_collector=metrics_collector
    )
    return coordinator.run(items, transform, cancel_event)


def list_images(directory: str = ".") -> List[str]:
    """List JPEG and TIFF files directly inside ``directory``, sorted by name."""
    images = []
    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if name.lower().endswith(IMAGE_EXTENSIONS) and os.path.isfile(path):
            images.append(path)
    return images


def log_configuration(
    config: BatchConfig, total_items: int, logger: logging.Logger
) -> None:
    """Log processing configuration."""
    logger.info("=" * 80)
    logger.info("LETTERBOX BATCH PROCESSOR")
    logger.info("=" * 80)
    logger.info(f"  Images:       {total_items}")
    logger.info(f"  Output:       {config.output_directory}")
    logger.info(f"  Aspect:       {config.aspect_ratio}")
    logger.info(f"  Background:   {'white' if config.background_is_white else 'black'}")
    logger.info(f"  Padding:      {config.padding_percent}%")
    logger.info(f"  Quality:      {config.quality}")
    logger.info(f"  Concurrency:  {config.concurrency}")
    logger.info(f"  Force:        {config.force}")
    logger.info("=" * 80)


def log_final_statistics(
    report: BatchReport, total_time: float, logger: logging.Logger
) -> None:
    """Log final processing statistics."""
    rate = report.processed_count / total_time if total_time > 0 else 0

    logger.info("=" * 80)
    logger.info("PROCESSING COMPLETED")
    logger.info("=" * 80)
    logger.info(f"Total execution time: {total_time:.1f}s")
    logger.info(f"Processing rate: {rate:.1f} images/sec")
    logger.info(f"Processed: {report.processed_count}")
    logger.info(f"Unmodified: {report.skipped_count}")
    logger.info("=" * 80)


def run_processing(
    items: Sequence[str],
    config: BatchConfig,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[StructuredLogger] = None,
) -> BatchReport:
    """Create the output directory, process ``items`` and log statistics."""
    logger = logger or StructuredLogger("letterbox")
    log_configuration(config, len(items), logger.logger)
    start_time = time.time()

    os.makedirs(config.output_directory, exist_ok=True)
    report = process_batch(items, config, cancel_event, logger=logger)

    log_final_statistics(report, time.time() - start_time, logger.logger)
    return report
