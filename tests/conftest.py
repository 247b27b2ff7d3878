"""Shared fixtures for checksum tests."""

import logging
import os

import pytest

from multipart_checksum.config_loader import ConfigLoader
from multipart_checksum.logging import PACKAGE_LOGGER

MIB = 1024 * 1024
LARGE_FILE_SIZE = 9 * MIB


@pytest.fixture
def five_byte_file(tmp_path):
    """5-byte file with content ``12345``."""
    path = tmp_path / "5byte.dat"
    path.write_bytes(b"12345")
    return path


@pytest.fixture
def empty_file(tmp_path):
    """Zero-byte file."""
    path = tmp_path / "empty.dat"
    path.write_bytes(b"")
    return path


@pytest.fixture(scope="session")
def large_file(tmp_path_factory):
    """9 MiB file of zero bytes, shared by the whole session."""
    path = tmp_path_factory.mktemp("large_data") / "9MiB"
    path.write_bytes(b"\0" * LARGE_FILE_SIZE)
    return path


@pytest.fixture
def restore_package_logger():
    """Undo handler and level changes made by setup_logging."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def isolated_config(tmp_path_factory, monkeypatch):
    """Hide system/user config files and MULTIPART_CHECKSUM_* variables from ConfigLoader."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setattr(ConfigLoader, "system_config_path", lambda self: config_dir / "system.toml")
    monkeypatch.setattr(ConfigLoader, "user_config_path", lambda self: config_dir / "user.toml")
    for key in list(os.environ):
        if key.startswith("MULTIPART_CHECKSUM_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(config_dir)
    return config_dir
