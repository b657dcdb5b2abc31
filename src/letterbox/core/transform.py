"""Per-item letterbox transform: staleness check plus the image pipeline."""

import os
from typing import Optional

from .codec import PillowCodec
from .error_handling import stage_errors
from .exceptions import (
    DecodeError,
    DestinationWriteError,
    EncodeError,
    SourceReadError,
)
from .filesystem import LocalFileSystem, calculate_dest_path
from .geometry import compute_layout
from .models import BatchConfig, ItemStatus
from .observability import LogContext, StructuredLogger
from .protocols import FileSystemProtocol, ImageCodecProtocol, LoggerProtocol


def should_skip(
    source_path: str,
    dest_path: str,
    force: bool,
    filesystem: FileSystemProtocol,
) -> bool:
    """
    Return True when the output for ``source_path`` is already up to date.

    The output is up to date when it exists and was modified strictly after
    the source. Any error while probing either path means the item is
    processed again.
    """
    if force:
        return False

    try:
        dest_info = filesystem.stat(dest_path)
        if not dest_info.exists:
            return False
        source_info = filesystem.stat(source_path)
    except Exception:  # noqa: BLE001
        return False

    if not source_info.exists:
        return False

    return dest_info.mtime_ns > source_info.mtime_ns


class LetterboxTransform:
    """Letterbox one source image into the configured output directory.

    Instances hold only read-only state and are safe to call from several
    worker threads at once, provided every item maps to its own destination.
    """

    def __init__(
        self,
        config: BatchConfig,
        codec: Optional[ImageCodecProtocol] = None,
        filesystem: Optional[FileSystemProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._config = config
        self._aspect = config.aspect
        self._codec = codec or PillowCodec()
        self._filesystem = filesystem or LocalFileSystem()
        self._logger = logger or StructuredLogger("letterbox.transform")

    @property
    def config(self) -> BatchConfig:
        return self._config

    def destination_for(self, source_path: str) -> str:
        return calculate_dest_path(source_path, self._config.output_directory)

    def __call__(self, source_path: str) -> ItemStatus:
        config = self._config
        dest_path = self.destination_for(source_path)
        log_context = LogContext(
            operation="letterbox", component="transform"
        ).with_metadata(source=source_path, dest=dest_path)

        if should_skip(source_path, dest_path, config.force, self._filesystem):
            self._logger.info("Unmodified", log_context)
            return ItemStatus.SKIPPED

        self._logger.info("Processing", log_context)

        with stage_errors(SourceReadError, source_path, "reading"):
            data = self._filesystem.read_all(source_path)

        with stage_errors(DecodeError, source_path, "decoding"):
            image = self._codec.decode(data)
            width, height = self._codec.size(image)
            layout = compute_layout(
                width, height, self._aspect, config.padding_fraction
            )

        self._logger.debug(
            "Computed layout",
            log_context,
            source_size=f"{width}x{height}",
            canvas_size=f"{layout.canvas_width}x{layout.canvas_height}",
        )

        with stage_errors(EncodeError, source_path, "encoding"):
            canvas = self._codec.new_canvas(layout.canvas_width, layout.canvas_height)
            self._codec.fill(canvas, layout.canvas, config.background_color)
            self._codec.composite(canvas, image, layout.placement)
            output = self._codec.encode(canvas, config.quality)

        with stage_errors(DestinationWriteError, source_path, "writing"):
            self._filesystem.ensure_dir(os.path.dirname(dest_path))
            self._filesystem.write_all(dest_path, output)

        return ItemStatus.PROCESSED
