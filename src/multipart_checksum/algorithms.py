"""Supported additional-checksum algorithms."""

from enum import Enum

from .errors import InvalidUsageError


class ChecksumAlgorithm(str, Enum):
    """Checksum families an object store can attach to an object.

    Values are the names the store reports in object metadata.
    """

    CRC32 = "CRC32"
    CRC32C = "CRC32C"
    CRC64NVME = "CRC64NVME"
    SHA1 = "SHA1"
    SHA256 = "SHA256"

    @classmethod
    def parse(cls, name: "str | ChecksumAlgorithm") -> "ChecksumAlgorithm":
        """Resolve an algorithm from any casing (``sha256``, ``Crc32c``, ``CRC64NVME``).

        Raises:
            InvalidUsageError: If the name is not a supported algorithm
        """
        if isinstance(name, cls):
            return name
        normalized = str(name).strip().upper().replace("-", "").replace("_", "")
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidUsageError(
                f"Unsupported checksum algorithm: {name}",
                algorithm=name,
                supported=[a.value for a in cls],
            ) from None

    @property
    def is_crc(self) -> bool:
        return self.value.startswith("CRC")
