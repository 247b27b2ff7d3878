"""Stateful hash accumulator producing plain and composite checksums.

A composite checksum follows object-store multipart semantics: every part is
hashed on its own, and the final value is the hash of the concatenated raw
part digests, suffixed with the number of parts (``<base64>-<N>``).
"""

import base64
import hashlib
import zlib
from abc import ABC, abstractmethod
from typing import Callable, List

from awscrt import checksums as crt_checksums

from .algorithms import ChecksumAlgorithm


class PartHasher(ABC):
    """Running hash over the bytes of a single part."""

    @abstractmethod
    def update(self, data: bytes) -> None:
        ...

    @abstractmethod
    def digest(self) -> bytes:
        """Return the raw (not encoded) digest of everything fed so far."""
        ...


class HashlibPartHasher(PartHasher):
    """Part hasher backed by a hashlib constructor."""

    def __init__(self, factory: Callable[[], "hashlib._Hash"]) -> None:
        self._hash = factory()

    def update(self, data: bytes) -> None:
        self._hash.update(data)

    def digest(self) -> bytes:
        return self._hash.digest()


class CrcPartHasher(PartHasher):
    """Part hasher for CRC families.

    ``crc_func(data, previous)`` must return the running CRC as an unsigned
    integer; the raw digest is its big-endian encoding on ``width`` bytes.
    """

    def __init__(self, crc_func: Callable[[bytes, int], int], width: int) -> None:
        self._crc_func = crc_func
        self._width = width
        self._crc = 0

    def update(self, data: bytes) -> None:
        self._crc = self._crc_func(data, self._crc)

    def digest(self) -> bytes:
        mask = (1 << (self._width * 8)) - 1
        return (self._crc & mask).to_bytes(self._width, byteorder="big")


def new_part_hasher(algorithm: ChecksumAlgorithm) -> PartHasher:
    """Create an empty part hasher for ``algorithm``."""
    if algorithm == ChecksumAlgorithm.SHA256:
        return HashlibPartHasher(hashlib.sha256)
    if algorithm == ChecksumAlgorithm.SHA1:
        return HashlibPartHasher(hashlib.sha1)
    if algorithm == ChecksumAlgorithm.CRC32:
        return CrcPartHasher(zlib.crc32, 4)
    if algorithm == ChecksumAlgorithm.CRC32C:
        return CrcPartHasher(crt_checksums.crc32c, 4)
    if algorithm == ChecksumAlgorithm.CRC64NVME:
        return CrcPartHasher(crt_checksums.crc64nvme, 8)
    raise ValueError(f"No part hasher for {algorithm!r}")


class AdditionalChecksum:
    """Accumulates per-part digests for one file.

    Usage:
        checksum = AdditionalChecksum(ChecksumAlgorithm.SHA256)
        checksum.update(part1)
        checksum.finalize()
        checksum.update(part2)
        checksum.finalize()
        composite = checksum.finalize_all()  # "<base64>-2"
    """

    def __init__(self, algorithm: ChecksumAlgorithm) -> None:
        self.algorithm = ChecksumAlgorithm.parse(algorithm)
        self._hasher = new_part_hasher(self.algorithm)
        self._part_digests: List[bytes] = []

    def update(self, data: bytes) -> None:
        """Feed bytes into the current part. May be called any number of times."""
        self._hasher.update(data)

    def finalize(self) -> str:
        """Close the current part and return its base64 digest.

        The running state is reset so the next ``update`` starts a new part.
        """
        raw = self._hasher.digest()
        self._part_digests.append(raw)
        self._hasher = new_part_hasher(self.algorithm)
        return base64.b64encode(raw).decode("ascii")

    def finalize_all(self) -> str:
        """Return the composite checksum over every part finalized so far."""
        combined = new_part_hasher(self.algorithm)
        combined.update(b"".join(self._part_digests))
        encoded = base64.b64encode(combined.digest()).decode("ascii")
        return f"{encoded}-{len(self._part_digests)}"

    @property
    def parts_count(self) -> int:
        return len(self._part_digests)
