"""Command line entry point: compute or verify the checksum of a local file."""

import argparse
import asyncio
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .algorithms import ChecksumAlgorithm
from .config import MultipartChecksumConfig
from .config_loader import ConfigLoader
from .errors import ChecksumError, ConfigurationError, InvalidUsageError
from .logging import LogContext, setup_logging
from .verify import (
    VerificationStatus,
    checksum_from_declared_parts,
    checksum_from_declared_parts_with_mode,
    checksum_from_fixed_chunking,
    is_unknown,
    verify_checksum,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INCONCLUSIVE = 2

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([KMG]i?B|B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "b": 1, "kb": 1000, "mb": 1000 ** 2, "gb": 1000 ** 3,
               "kib": 1024, "mib": 1024 ** 2, "gib": 1024 ** 3}


def parse_size(value: str) -> int:
    """Parse a byte size such as ``8388608``, ``8MiB`` or ``5MB``."""
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise argparse.ArgumentTypeError(f"invalid size: {value!r}")
    number, unit = match.groups()
    return int(number) * _SIZE_UNITS[(unit or "").lower()]


def parse_part_sizes(value: str) -> List[int]:
    """Parse a comma-separated part-size list."""
    return [parse_size(part) for part in value.split(",") if part.strip()]


async def checksum_command(
    config: MultipartChecksumConfig,
    path: Path,
    part_sizes: Optional[Sequence[int]] = None,
    multipart: Optional[bool] = None,
    expected: Optional[str] = None,
) -> int:
    """Compute the checksum of ``path`` and optionally compare it with ``expected``.

    Args:
        config: Configuration (algorithm, threshold, chunk size)
        path: Local file
        part_sizes: Part layout reported by the store, if known
        multipart: Multipart flag reported by the store, if known
        expected: Checksum reported by the store

    Returns:
        Exit code (0 ok/match, 1 mismatch or error, 2 inconclusive or bad usage)
    """
    settings = config.checksum

    with LogContext(path=str(path), algorithm=settings.algorithm.value):
        try:
            if part_sizes is None:
                checksum = await checksum_from_fixed_chunking(
                    path,
                    settings.algorithm,
                    settings.multipart_chunksize,
                    settings.multipart_threshold,
                )
            elif multipart is None:
                checksum = await checksum_from_declared_parts(
                    path, settings.algorithm, part_sizes, settings.multipart_threshold
                )
            else:
                checksum = await checksum_from_declared_parts_with_mode(
                    path, settings.algorithm, multipart, part_sizes
                )
        except InvalidUsageError as e:
            logger.error(f"Invalid arguments: {e}")
            return EXIT_INCONCLUSIVE
        except ChecksumError as e:
            logger.error(f"Checksum computation failed: {e}")
            return EXIT_FAILURE

        print(checksum)

        if expected is None:
            if is_unknown(checksum):
                logger.warning("Part layout does not match the file; checksum cannot be verified")
                return EXIT_INCONCLUSIVE
            return EXIT_OK

        status = verify_checksum(checksum, expected)
        if status == VerificationStatus.MATCH:
            logger.info("Checksum matches")
            return EXIT_OK
        if status == VerificationStatus.MISMATCH:
            logger.error(f"Checksum mismatch: local={checksum} expected={expected}")
            return EXIT_FAILURE
        logger.warning("Checksum could not be verified")
        return EXIT_INCONCLUSIVE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multipart-checksum",
        description="Compute object-store compatible (multipart) checksums of a local file"
    )
    parser.add_argument("path", type=Path, help="File to checksum")
    parser.add_argument(
        "--algorithm",
        type=ChecksumAlgorithm.parse,
        help="Checksum algorithm: CRC32, CRC32C, CRC64NVME, SHA1, SHA256 (overrides config)"
    )
    parser.add_argument(
        "--parts",
        type=parse_part_sizes,
        help="Comma-separated part sizes reported by the store, e.g. 8MiB,1MiB"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--multipart",
        dest="multipart",
        action="store_const",
        const=True,
        help="Object is stored as multipart (requires --parts)"
    )
    mode.add_argument(
        "--single",
        dest="multipart",
        action="store_const",
        const=False,
        help="Object is stored as a single part (requires --parts)"
    )
    parser.add_argument("--chunksize", type=parse_size, help="Multipart chunk size (overrides config)")
    parser.add_argument("--threshold", type=parse_size, help="Multipart threshold (overrides config)")
    parser.add_argument("--expected", help="Checksum reported by the store")
    parser.add_argument("--config", type=Path, help="Path to config file (defaults.toml)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the multipart-checksum command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.multipart is not None and args.parts is None:
        parser.error("--multipart/--single require --parts")

    try:
        config = ConfigLoader().load(defaults_path=args.config)
        overrides = {
            key: value
            for key, value in (
                ("algorithm", args.algorithm),
                ("multipart_chunksize", args.chunksize),
                ("multipart_threshold", args.threshold),
            )
            if value is not None
        }
        if overrides:
            config = MultipartChecksumConfig(
                logging=config.logging,
                checksum=config.checksum.model_validate(
                    {**config.checksum.model_dump(), **overrides}
                ),
            )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_INCONCLUSIVE
    except ValueError as e:
        print(f"Invalid option: {e}", file=sys.stderr)
        return EXIT_INCONCLUSIVE

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=Path(config.logging.file) if config.logging.file else None,
    )

    return asyncio.run(
        checksum_command(
            config,
            args.path,
            part_sizes=args.parts,
            multipart=args.multipart,
            expected=args.expected,
        )
    )


if __name__ == "__main__":
    sys.exit(main())
