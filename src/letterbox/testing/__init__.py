"""Testing utilities and fakes for letterbox."""

from .fakes import (
    FakeFile,
    FakeFileSystem,
    FakeLogger,
    InstrumentedTransform,
    create_test_image,
    setup_test_filesystem,
)

__all__ = [
    "FakeFile",
    "FakeFileSystem",
    "FakeLogger",
    "InstrumentedTransform",
    "create_test_image",
    "setup_test_filesystem",
]
