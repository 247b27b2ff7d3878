"""Configuration schema for multipart checksum computation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .algorithms import ChecksumAlgorithm

MIB = 1024 * 1024
DEFAULT_MULTIPART_THRESHOLD = 8 * MIB
DEFAULT_MULTIPART_CHUNKSIZE = 8 * MIB
MIN_MULTIPART_CHUNKSIZE = 5 * MIB


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    format: Literal["simple", "detailed", "json"] = Field(
        default="simple",
        description="Console log format"
    )
    file: str | None = Field(default=None, description="Optional log file path (JSON lines)")

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('format', mode='before')
    @classmethod
    def normalize_format(cls, v: str) -> str:
        if isinstance(v, str):
            return v.lower()
        return v


class ChecksumConfig(BaseModel):
    """Checksum algorithm and the part layout used when no remote layout is known."""

    model_config = ConfigDict(extra='forbid')

    algorithm: ChecksumAlgorithm = Field(
        default=ChecksumAlgorithm.SHA256,
        description="Additional checksum algorithm"
    )
    multipart_threshold: int = Field(
        default=DEFAULT_MULTIPART_THRESHOLD,
        ge=1,
        description="Object size (bytes) from which uploads are multipart"
    )
    multipart_chunksize: int = Field(
        default=DEFAULT_MULTIPART_CHUNKSIZE,
        ge=MIN_MULTIPART_CHUNKSIZE,
        description="Part size (bytes) of multipart uploads"
    )

    @field_validator('algorithm', mode='before')
    @classmethod
    def parse_algorithm(cls, v):
        """Accept any casing of the algorithm name."""
        if isinstance(v, str):
            return ChecksumAlgorithm.parse(v)
        return v


class MultipartChecksumConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    checksum: ChecksumConfig = Field(default_factory=ChecksumConfig)
