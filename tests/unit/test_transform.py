"""Tests for the per-item letterbox transform."""

import io

import pytest
from PIL import Image

from letterbox.core.codec import PillowCodec
from letterbox.core.exceptions import (
    DecodeError,
    DestinationWriteError,
    EncodeError,
    SourceReadError,
)
from letterbox.core.models import BatchConfig, ItemStatus
from letterbox.core.transform import LetterboxTransform, should_skip
from letterbox.testing.fakes import (
    FakeFileSystem,
    FakeLogger,
    create_test_image,
    setup_test_filesystem,
)

SOURCE = "photos/landscape.jpg"
DEST = "out/photos/landscape.jpg"


def _make_transform(filesystem, codec=None, **options):
    options.setdefault("output_directory", "out")
    options.setdefault("concurrency", 1)
    config = BatchConfig(**options)
    return LetterboxTransform(config, codec=codec, filesystem=filesystem, logger=FakeLogger())


def _decode(data):
    return Image.open(io.BytesIO(data))


class TestShouldSkip:
    """Tests for the staleness check."""

    def test_force_never_skips(self):
        fs = FakeFileSystem()
        fs.add_file("a.jpg", b"src", mtime_ns=1)
        fs.add_file("out/a.jpg", b"dst", mtime_ns=2)

        assert should_skip("a.jpg", "out/a.jpg", True, fs) is False
        assert fs.operations == []

    def test_missing_destination(self):
        fs = FakeFileSystem()
        fs.add_file("a.jpg", b"src")
        assert should_skip("a.jpg", "out/a.jpg", False, fs) is False

    def test_destination_newer(self):
        fs = FakeFileSystem()
        fs.add_file("a.jpg", b"src", mtime_ns=1)
        fs.add_file("out/a.jpg", b"dst", mtime_ns=2)
        assert should_skip("a.jpg", "out/a.jpg", False, fs) is True

    def test_destination_older(self):
        fs = FakeFileSystem()
        fs.add_file("a.jpg", b"src", mtime_ns=5)
        fs.add_file("out/a.jpg", b"dst", mtime_ns=2)
        assert should_skip("a.jpg", "out/a.jpg", False, fs) is False

    def test_equal_times_reprocess(self):
        fs = FakeFileSystem()
        fs.add_file("a.jpg", b"src", mtime_ns=3)
        fs.add_file("out/a.jpg", b"dst", mtime_ns=3)
        assert should_skip("a.jpg", "out/a.jpg", False, fs) is False

    @pytest.mark.parametrize("failing_path", ["a.jpg", "out/a.jpg"])
    def test_stat_error_means_process(self, failing_path):
        fs = FakeFileSystem()
        fs.add_file("a.jpg", b"src", mtime_ns=1)
        fs.add_file("out/a.jpg", b"dst", mtime_ns=2)
        fs.fail_on("stat", failing_path, PermissionError("denied"))
        assert should_skip("a.jpg", "out/a.jpg", False, fs) is False

    def test_missing_source(self):
        fs = FakeFileSystem()
        fs.add_file("out/a.jpg", b"dst", mtime_ns=2)
        assert should_skip("a.jpg", "out/a.jpg", False, fs) is False


class TestLetterboxTransform:
    """Tests for the decode, letterbox, encode, write pipeline."""

    def test_processes_into_output_directory(self):
        fs = setup_test_filesystem()
        transform = _make_transform(fs, aspect_ratio="1:1", quality=100)

        status = transform(SOURCE)

        assert status is ItemStatus.PROCESSED
        assert "out/photos" in fs.directories
        output = _decode(fs.files[DEST].data)
        assert output.format == "JPEG"
        assert output.size == (200, 200)

    def test_black_background_by_default(self):
        fs = setup_test_filesystem()
        transform = _make_transform(fs, aspect_ratio="1:1", quality=100)

        transform(SOURCE)

        output = _decode(fs.files[DEST].data).convert("RGB")
        corner = output.getpixel((2, 2))
        center = output.getpixel((100, 100))
        assert all(c < 20 for c in corner)
        assert center[0] > 200 and center[1] < 60 and center[2] < 60

    def test_white_background(self):
        fs = setup_test_filesystem()
        transform = _make_transform(
            fs, aspect_ratio="1:1", quality=100, background_is_white=True
        )

        transform(SOURCE)

        output = _decode(fs.files[DEST].data).convert("RGB")
        assert all(c > 235 for c in output.getpixel((2, 2)))
        assert all(c > 235 for c in output.getpixel((197, 197)))

    def test_padding_inflates_canvas(self):
        fs = setup_test_filesystem()
        transform = _make_transform(fs, aspect_ratio="1:1", padding_percent=10)

        transform(SOURCE)

        assert _decode(fs.files[DEST].data).size == (220, 220)

    def test_portrait_source(self):
        fs = setup_test_filesystem()
        transform = _make_transform(fs, aspect_ratio="16:9")

        transform("photos/portrait.jpg")

        assert _decode(fs.files["out/photos/portrait.jpg"].data).size == (284, 160)

    def test_up_to_date_output_skipped(self):
        fs = setup_test_filesystem()
        fs.add_file(DEST, b"previous output")
        transform = _make_transform(fs)

        status = transform(SOURCE)

        assert status is ItemStatus.SKIPPED
        assert fs.count("read_all") == 0
        assert fs.files[DEST].data == b"previous output"
        assert "Unmodified" in transform._logger.messages("INFO")

    def test_force_reprocesses(self):
        fs = setup_test_filesystem()
        fs.add_file(DEST, b"previous output")
        transform = _make_transform(fs, force=True)

        assert transform(SOURCE) is ItemStatus.PROCESSED
        assert fs.files[DEST].data != b"previous output"

    def test_stale_output_reprocessed(self):
        fs = setup_test_filesystem()
        fs.add_file(DEST, b"previous output", mtime_ns=1)
        transform = _make_transform(fs)

        assert transform(SOURCE) is ItemStatus.PROCESSED

    def test_source_read_error(self):
        fs = setup_test_filesystem()
        fs.fail_on("read_all", SOURCE, PermissionError("denied"))
        transform = _make_transform(fs)

        with pytest.raises(SourceReadError) as exc_info:
            transform(SOURCE)

        assert exc_info.value.item_id == SOURCE
        assert isinstance(exc_info.value.cause, PermissionError)
        assert DEST not in fs.files

    def test_missing_source_is_read_error(self):
        transform = _make_transform(FakeFileSystem())
        with pytest.raises(SourceReadError):
            transform("photos/gone.jpg")

    def test_corrupt_source_is_decode_error(self):
        fs = FakeFileSystem()
        fs.add_file("photos/broken.jpg", b"definitely not a jpeg")
        transform = _make_transform(fs)

        with pytest.raises(DecodeError) as exc_info:
            transform("photos/broken.jpg")

        assert exc_info.value.item_id == "photos/broken.jpg"
        assert "out/photos/broken.jpg" not in fs.files

    def test_encode_error(self):
        class BrokenEncoder(PillowCodec):
            def encode(self, image, quality):
                raise OSError("encoder exploded")

        fs = setup_test_filesystem()
        transform = _make_transform(fs, codec=BrokenEncoder())

        with pytest.raises(EncodeError) as exc_info:
            transform(SOURCE)

        assert "encoder exploded" in str(exc_info.value)
        assert DEST not in fs.files

    def test_destination_write_error(self):
        fs = setup_test_filesystem()
        fs.fail_on("write_all", DEST)
        transform = _make_transform(fs)

        with pytest.raises(DestinationWriteError) as exc_info:
            transform(SOURCE)

        assert exc_info.value.kind == "destination_write"

    def test_directory_creation_error(self):
        fs = setup_test_filesystem()
        fs.fail_on("ensure_dir", "out/photos")
        transform = _make_transform(fs)

        with pytest.raises(DestinationWriteError):
            transform(SOURCE)

    def test_tiff_source_written_as_jpeg(self):
        fs = FakeFileSystem()
        fs.add_file("scan.tif", create_test_image(40, 30, format="TIFF"))
        transform = _make_transform(fs, aspect_ratio="4:3")

        transform("scan.tif")

        output = _decode(fs.files["out/scan.tif"].data)
        assert output.format == "JPEG"
        assert output.size == (40, 53)
