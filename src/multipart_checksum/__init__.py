"""Object-store compatible (multipart) checksums of local files."""

from .accumulator import AdditionalChecksum
from .algorithms import ChecksumAlgorithm
from .config import ChecksumConfig, LoggingConfig, MultipartChecksumConfig
from .config_loader import ConfigLoader
from .errors import ChecksumError, ChecksumReadError, ConfigurationError, InvalidUsageError
from .logging import LogContext, get_logger, setup_logging
from .verify import (
    UNKNOWN_CHECKSUM_VALUE,
    VerificationStatus,
    checksum_from_declared_parts,
    checksum_from_declared_parts_with_mode,
    checksum_from_fixed_chunking,
    is_multipart,
    is_unknown,
    verify_checksum,
)

__version__ = "0.1.0"

__all__ = [
    'AdditionalChecksum',
    'ChecksumAlgorithm',
    'ChecksumConfig',
    'LoggingConfig',
    'MultipartChecksumConfig',
    'ConfigLoader',
    'ChecksumError',
    'ChecksumReadError',
    'ConfigurationError',
    'InvalidUsageError',
    'LogContext',
    'get_logger',
    'setup_logging',
    'UNKNOWN_CHECKSUM_VALUE',
    'VerificationStatus',
    'checksum_from_declared_parts',
    'checksum_from_declared_parts_with_mode',
    'checksum_from_fixed_chunking',
    'is_multipart',
    'is_unknown',
    'verify_checksum',
]
