# tests/core/test_error_handling.py

import pytest

from letterbox.core.error_handling import BatchOperationContextManager, stage_errors
from letterbox.core.exceptions import (
    DecodeError,
    DestinationWriteError,
    SourceReadError,
)
from letterbox.core.models import ItemResult, ItemStatus
from letterbox.testing.fakes import FakeLogger


# --- Tests for stage_errors ---

def test_stage_errors_wraps_library_exception():
    """Test that a raw exception becomes the stage's error kind."""
    with pytest.raises(DecodeError) as exc_info:
        with stage_errors(DecodeError, "a.jpg", "decoding"):
            raise ValueError("not an image")

    error = exc_info.value
    assert error.item_id == "a.jpg"
    assert isinstance(error.cause, ValueError)
    assert error.__cause__ is error.cause
    assert "decoding: not an image" in str(error)


def test_stage_errors_passes_letterbox_errors_through():
    """Test that an already classified error keeps its kind."""
    original = SourceReadError("reading: gone", item_id="a.jpg")
    with pytest.raises(SourceReadError) as exc_info:
        with stage_errors(DestinationWriteError, "a.jpg", "writing"):
            raise original
    assert exc_info.value is original


def test_stage_errors_no_exception():
    with stage_errors(DecodeError, "a.jpg", "decoding"):
        value = 1
    assert value == 1


# --- Tests for BatchOperationContextManager ---

def test_batch_context_logs_start_and_success():
    logger = FakeLogger()
    with BatchOperationContextManager("Test batch", logger) as batch:
        batch.add_result(ItemResult(item_id="a", status=ItemStatus.PROCESSED, success=True))
        batch.add_result(ItemResult(item_id="b", status=ItemStatus.SKIPPED, success=True))

    messages = logger.messages("INFO")
    assert messages[0] == "Starting Test batch."
    assert "1 processed, 1 unmodified" in messages[-1]
    assert batch.count(ItemStatus.PROCESSED) == 1
    assert batch.count(ItemStatus.SKIPPED) == 1


def test_batch_context_logs_failed_items():
    logger = FakeLogger()
    with BatchOperationContextManager("Test batch", logger) as batch:
        batch.add_result(ItemResult(item_id="bad.jpg", success=False, error="boom"))

    assert any("1 failed item" in m for m in logger.messages("WARNING"))
    errors = logger.messages("ERROR")
    assert len(errors) == 1
    assert "bad.jpg" in errors[0]
    assert "boom" in errors[0]


def test_batch_context_does_not_suppress_exceptions():
    logger = FakeLogger()
    with pytest.raises(RuntimeError):
        with BatchOperationContextManager("Test batch", logger):
            raise RuntimeError("stop")
    assert any("stopped" in m for m in logger.messages("WARNING"))
