"""Checksum computation for verifying local files against object-store checksums.

All three entry points return either a plain base64 digest, a composite
``<base64>-<N>`` digest, or ``UNKNOWN_CHECKSUM_VALUE`` when the declared part
layout does not reconcile with the file on disk. ``UNKNOWN`` means "could not
verify" and must never be treated as a match.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from .accumulator import AdditionalChecksum
from .algorithms import ChecksumAlgorithm
from .errors import ChecksumReadError, InvalidUsageError
from .reader import file_size, open_file, read_declared_parts, read_exact

logger = logging.getLogger(__name__)

UNKNOWN_CHECKSUM_VALUE = "UNKNOWN"


class VerificationStatus(str, Enum):
    """Outcome of comparing a local checksum with the one the store reports."""

    MATCH = "match"
    MISMATCH = "mismatch"
    UNKNOWN = "unknown"


def is_unknown(checksum: Optional[str]) -> bool:
    return checksum == UNKNOWN_CHECKSUM_VALUE


def is_multipart(part_sizes: Sequence[int], multipart_threshold: int) -> bool:
    """Return True if a part layout is reported with composite formatting.

    A layout is multipart when it has more than one part, or a single part
    whose size reaches the threshold.
    """
    parts_count = len(part_sizes)
    return parts_count > 1 or (parts_count == 1 and multipart_threshold <= part_sizes[0])


def verify_checksum(local: Optional[str], remote: Optional[str]) -> VerificationStatus:
    """Compare a computed checksum with the value reported by the store."""
    if local is None or remote is None or is_unknown(local) or is_unknown(remote):
        return VerificationStatus.UNKNOWN
    if local == remote:
        return VerificationStatus.MATCH
    return VerificationStatus.MISMATCH


def _validate_part_sizes(part_sizes: Sequence[int]) -> None:
    if not part_sizes:
        raise InvalidUsageError("part_sizes is empty")
    for index, size in enumerate(part_sizes):
        if size < 0:
            raise InvalidUsageError(
                f"part size must not be negative, got {size}", part_index=index, part_size=size
            )


async def _checksum_declared_parts(
    path: Path,
    algorithm: ChecksumAlgorithm,
    multipart: bool,
    part_sizes: Sequence[int],
) -> str:
    checksum = AdditionalChecksum(algorithm)

    async with open_file(path) as handle:
        last_hash = await read_declared_parts(handle, path, checksum, part_sizes)

    if last_hash is None:
        return UNKNOWN_CHECKSUM_VALUE
    if not multipart:
        return last_hash
    return checksum.finalize_all()


async def checksum_from_declared_parts(
    path: Path | str,
    algorithm: ChecksumAlgorithm | str,
    part_sizes: Sequence[int],
    multipart_threshold: int,
) -> str:
    """Compute the checksum of a file uploaded with a known part layout.

    Multipart formatting is derived from ``part_sizes`` and
    ``multipart_threshold`` (see ``is_multipart``).

    Args:
        path: Local file
        algorithm: Checksum algorithm
        part_sizes: Size of each uploaded part, in order
        multipart_threshold: Size from which a single part is still
            reported as multipart

    Returns:
        Plain digest, composite digest, or ``UNKNOWN_CHECKSUM_VALUE``

    Raises:
        InvalidUsageError: If ``part_sizes`` is empty or holds a negative size
        ChecksumReadError: If the file cannot be read
    """
    _validate_part_sizes(part_sizes)
    path = Path(path)
    algorithm = ChecksumAlgorithm.parse(algorithm)
    multipart = is_multipart(part_sizes, multipart_threshold)

    logger.debug(
        "Computing checksum from declared parts",
        extra={
            "extra_fields": {
                "path": str(path),
                "algorithm": algorithm.value,
                "parts_count": len(part_sizes),
                "multipart": multipart,
            }
        },
    )
    return await _checksum_declared_parts(path, algorithm, multipart, part_sizes)


async def checksum_from_declared_parts_with_mode(
    path: Path | str,
    algorithm: ChecksumAlgorithm | str,
    multipart: bool,
    part_sizes: Sequence[int],
) -> str:
    """Compute the checksum of a file against part metadata fetched from the store.

    Unlike ``checksum_from_declared_parts`` the multipart flag comes from the
    remote object instead of a threshold.

    Raises:
        InvalidUsageError: If ``part_sizes`` is empty, or ``multipart`` is False
            while more than one part is declared (inconsistent remote metadata)
        ChecksumReadError: If the file cannot be read
    """
    _validate_part_sizes(part_sizes)
    if not multipart and len(part_sizes) >= 2:
        raise InvalidUsageError(
            "multipart is False but part_sizes has more than one element",
            parts_count=len(part_sizes),
        )
    path = Path(path)
    algorithm = ChecksumAlgorithm.parse(algorithm)

    logger.debug(
        "Computing checksum from declared parts with explicit mode",
        extra={
            "extra_fields": {
                "path": str(path),
                "algorithm": algorithm.value,
                "parts_count": len(part_sizes),
                "multipart": multipart,
            }
        },
    )
    return await _checksum_declared_parts(path, algorithm, multipart, part_sizes)


async def checksum_from_fixed_chunking(
    path: Path | str,
    algorithm: ChecksumAlgorithm | str,
    multipart_chunksize: int,
    multipart_threshold: int,
) -> str:
    """Compute the checksum a file will have once uploaded with fixed-size parts.

    Files smaller than ``multipart_threshold`` are hashed as one part and get a
    plain digest; larger files are split into ``multipart_chunksize`` parts
    (the last one possibly shorter) and get a composite digest. The layout is
    derived from the file itself, so the result is never ``UNKNOWN``.

    Raises:
        InvalidUsageError: If ``multipart_chunksize`` is not positive
        ChecksumReadError: If the file cannot be read, or ends before the
            length reported when it was opened
    """
    if multipart_chunksize <= 0:
        raise InvalidUsageError(
            f"multipart_chunksize must be positive, got {multipart_chunksize}",
            multipart_chunksize=multipart_chunksize,
        )
    path = Path(path)
    algorithm = ChecksumAlgorithm.parse(algorithm)
    checksum = AdditionalChecksum(algorithm)

    async with open_file(path) as handle:
        remaining_bytes = file_size(handle, path)

        if remaining_bytes < multipart_threshold:
            checksum.update(await _read_chunk(handle, path, remaining_bytes))
            return checksum.finalize()

        while remaining_bytes > 0:
            chunk_size = min(multipart_chunksize, remaining_bytes)
            checksum.update(await _read_chunk(handle, path, chunk_size))
            checksum.finalize()
            remaining_bytes -= chunk_size

    logger.debug(
        "Computed checksum from fixed chunking",
        extra={"extra_fields": {"path": str(path), "parts_count": checksum.parts_count}},
    )
    return checksum.finalize_all()


async def _read_chunk(handle: Any, path: Path, size: int) -> bytearray:
    try:
        return await read_exact(handle, size)
    except asyncio.IncompleteReadError as e:
        raise ChecksumReadError(
            f"File ended after {len(e.partial)} of {size} bytes while reading",
            path=str(path),
        ) from e
    except OSError as e:
        raise ChecksumReadError(f"Failed to read file: {e}", path=str(path)) from e
