"""Local filesystem access and destination path mapping."""

import contextlib
import os
import tempfile
from pathlib import Path, PurePath

from .models import FileInfo

# mkstemp creates owner-only files
OUTPUT_FILE_MODE = 0o644


class LocalFileSystem:
    """Filesystem backed by the operating system."""

    def stat(self, path: str) -> FileInfo:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return FileInfo(exists=False)
        return FileInfo(exists=True, mtime_ns=st.st_mtime_ns)

    def read_all(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def write_all(self, path: str, data: bytes) -> None:
        """Write through a temporary sibling so a failed write never leaves a partial file."""
        fd, tmp_path = tempfile.mkstemp(
            prefix=".letterbox-", suffix=".tmp", dir=os.path.dirname(path) or "."
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.chmod(tmp_path, OUTPUT_FILE_MODE)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise

    def ensure_dir(self, path: str) -> None:
        if path:
            os.makedirs(path, exist_ok=True)


def calculate_dest_path(source_path: str, output_directory: str) -> str:
    """
    Calculate the output path for a source image.

    The source path is normalized and joined under the output directory.
    Absolute sources drop their anchor and leading ``..`` components are
    removed, so the result always stays under the output directory.

    Args:
        source_path: Path of the source image
        output_directory: Root directory for processed images

    Returns:
        Destination path for the processed image
    """
    relative = PurePath(source_path)
    if relative.anchor:
        relative = relative.relative_to(relative.anchor)
    parts = [p for p in PurePath(os.path.normpath(relative)).parts if p != ".."]
    return os.path.normpath(os.path.join(output_directory, *parts))
