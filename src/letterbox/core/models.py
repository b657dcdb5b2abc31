"""Shared data models for letterbox."""

import os
from enum import Enum
from fractions import Fraction
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .geometry import AspectRatio, parse_aspect

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def default_concurrency() -> int:
    """Available parallelism, at least one."""
    return os.cpu_count() or 1


class BatchConfig(BaseModel):
    """Immutable configuration for one batch run."""

    model_config = ConfigDict(frozen=True)

    output_directory: str = "processed"
    background_is_white: bool = False
    aspect_ratio: str = "16:9"
    quality: int = Field(default=90, ge=0, le=100)
    padding_percent: int = Field(default=0, ge=0)
    concurrency: int = Field(default_factory=default_concurrency, ge=1)
    force: bool = False

    @field_validator("aspect_ratio")
    @classmethod
    def validate_aspect_ratio(cls, value: str) -> str:
        parse_aspect(value)
        return value

    @field_validator("output_directory")
    @classmethod
    def validate_output_directory(cls, value: str) -> str:
        if not value:
            raise ValueError("output directory must not be empty")
        return value

    @classmethod
    def create(cls, **options: Any) -> "BatchConfig":
        """Build a validated config, raising ConfigurationError on bad options."""
        try:
            return cls(**options)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @property
    def aspect(self) -> AspectRatio:
        return parse_aspect(self.aspect_ratio)

    @property
    def padding_fraction(self) -> Fraction:
        return Fraction(self.padding_percent, 100)

    @property
    def background_color(self) -> Tuple[int, int, int]:
        return WHITE if self.background_is_white else BLACK


class FileInfo(BaseModel):
    """Result of probing a path on the filesystem."""

    exists: bool
    mtime_ns: int = 0


class ItemStatus(str, Enum):
    """What happened to an item that did not fail."""

    PROCESSED = "processed"
    SKIPPED = "skipped"


class ItemResult(BaseModel):
    """Outcome of a single transform invocation."""

    item_id: str
    status: Optional[ItemStatus] = None
    success: bool = False
    error: str = ""
    processing_time: float = 0.0


class BatchReport(BaseModel):
    """Advisory summary of a successful batch run."""

    total_items: int = 0
    processed: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    processing_time: float = 0.0

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
