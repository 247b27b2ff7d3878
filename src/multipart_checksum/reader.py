"""Exact-length reading of a file along a declared part-size plan."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional, Sequence

import aiofiles

from .accumulator import AdditionalChecksum
from .errors import ChecksumReadError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_file(path: Path) -> AsyncIterator[Any]:
    """Open ``path`` for binary reading; the handle is closed on every exit path."""
    try:
        handle = await aiofiles.open(path, "rb")
    except OSError as e:
        raise ChecksumReadError(f"Failed to open file: {e}", path=str(path)) from e
    try:
        yield handle
    finally:
        await handle.close()


READ_SLICE_SIZE = 8 * 1024 * 1024


async def read_exact(handle: Any, size: int) -> bytearray:
    """Read exactly ``size`` bytes from an aiofiles binary handle.

    Reads at most ``READ_SLICE_SIZE`` bytes per call, so memory grows with the
    bytes actually available rather than with ``size``.

    Raises:
        asyncio.IncompleteReadError: If the stream ends before ``size`` bytes;
            ``partial`` holds what was read
        OSError: On any other read failure
    """
    buffer = bytearray()
    while len(buffer) < size:
        chunk = await handle.read(min(size - len(buffer), READ_SLICE_SIZE))
        if not chunk:
            raise asyncio.IncompleteReadError(bytes(buffer), size)
        buffer.extend(chunk)
    return buffer


def file_size(handle: Any, path: Path) -> int:
    """Return the size of the open file behind ``handle``."""
    try:
        return os.fstat(handle.fileno()).st_size
    except OSError as e:
        raise ChecksumReadError(f"Failed to stat file: {e}", path=str(path)) from e


async def read_declared_parts(
    handle: Any,
    path: Path,
    checksum: AdditionalChecksum,
    part_sizes: Sequence[int],
) -> Optional[str]:
    """Hash ``handle`` part by part following ``part_sizes``.

    Every declared part is read in full, fed to ``checksum`` and finalized.

    Returns:
        The base64 digest of the last part, or None when the plan does not
        reconcile with the real file (file shorter or longer than the sum of
        the declared parts)

    Raises:
        ChecksumReadError: On any read failure other than end of stream
    """
    size = file_size(handle, path)
    read_bytes = 0
    last_hash = ""

    for index, part_size in enumerate(part_sizes):
        if read_bytes + part_size > size:
            logger.warning(
                "Declared part extends past the end of the file",
                extra={
                    "extra_fields": {
                        "path": str(path),
                        "part_index": index,
                        "part_size": part_size,
                        "declared_size": read_bytes + part_size,
                        "file_size": size,
                    }
                },
            )
            return None

        try:
            data = await read_exact(handle, part_size)
        except asyncio.IncompleteReadError as e:
            logger.warning(
                "File ended before declared part was complete",
                extra={
                    "extra_fields": {
                        "path": str(path),
                        "part_index": index,
                        "part_size": part_size,
                        "part_bytes_read": len(e.partial),
                        "file_size": size,
                    }
                },
            )
            return None
        except OSError as e:
            raise ChecksumReadError(f"Failed to read file: {e}", path=str(path), part_index=index) from e

        read_bytes += len(data)
        checksum.update(data)
        last_hash = checksum.finalize()

    if read_bytes != size:
        logger.warning(
            "Declared parts do not cover the whole file",
            extra={
                "extra_fields": {
                    "path": str(path),
                    "declared_size": read_bytes,
                    "file_size": size,
                }
            },
        )
        return None

    return last_hash
