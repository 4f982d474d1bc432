"""
File access for analysis inputs and result documents.

Inputs are read with a size cap so a wrong ``--discovery-file`` cannot
pull a huge file into memory. Results are written next to their final
location and moved into place, so readers never observe a half-written
``<dependency>.json``. Every failure surfaces as
:class:`~peerbump.exceptions.FileOperationError`.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Optional, Union

from peerbump.constants import MAX_FILE_SIZE
from peerbump.utils.logger import get_logger
from peerbump.exceptions import FileOperationError

logger = get_logger("filesystem")

PathLike = Union[str, Path]


@contextmanager
def _staging_file(target: Path) -> Iterator[IO[str]]:
    """Yield a hidden temp file beside ``target``, removed if anything fails."""
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    staged = Path(handle.name)
    try:
        with handle:
            yield handle
    except BaseException:
        staged.unlink(missing_ok=True)
        raise


def _atomic_write(target: Path, content: str) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with _staging_file(target) as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
            handle.close()
            Path(handle.name).replace(target)
    except OSError as exc:
        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Return the text of ``file_path``.

    Args:
        file_path: File to read.
        max_size: Largest accepted size in bytes, or None for no cap.
        encoding: Text encoding of the file.

    Raises:
        FileOperationError: Missing path, directory, oversized file, or
            undecodable content.
    """
    path = Path(file_path)

    def failure(message: str, exc: Optional[Exception] = None) -> FileOperationError:
        return FileOperationError(
            message, file_path=str(path), operation="read", original_error=exc
        )

    if not path.is_file():
        raise failure(f"Not a file: {path}")

    size = path.stat().st_size
    if max_size is not None and size > max_size:
        raise failure(f"File too large: {size} bytes (max {max_size})")

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise failure(f"Cannot read {path}: {exc}", exc) from exc


def safe_write_file(file_path: PathLike, content: str) -> Path:
    """Atomically replace ``file_path`` with ``content``, creating parents."""
    path = Path(file_path)
    _atomic_write(path, content)
    logger.debug("Wrote %s (%d chars)", path, len(content))
    return path


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve ``path``; with ``base_dir`` it must stay inside that directory.

    A dependency named ``../x`` would otherwise write its result outside
    the analysis folder.
    """
    resolved = Path(path).expanduser().resolve(strict=False)
    if base_dir is None:
        return resolved

    base = Path(base_dir).expanduser().resolve(strict=False)
    if resolved != base and base not in resolved.parents:
        raise FileOperationError(
            f"Path outside allowed base directory {base}: {resolved}",
            file_path=str(path),
            operation="validate",
        )
    return resolved
