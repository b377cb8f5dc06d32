# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""Tests for configuration, builder functions and environment loading."""

from pathlib import Path

import pytest

from imgarchive.builder import (
    build_config,
    create_config,
    create_empty_config,
    pipe,
    verbose_output,
    with_backup_dir,
    with_compression,
    with_workers,
)
from imgarchive.config import ArchiveConfig, CompressionKind
from imgarchive.env import create_config_from_env
from imgarchive.exceptions import ConfigurationError


def test_defaults():
    config = ArchiveConfig()

    assert config.backup_dir == Path("docker-backups")
    assert config.max_workers == 3
    assert config.compression == CompressionKind.GZIP
    assert config.engine_binary == "docker"
    assert config.item_timeout_seconds is None


def test_validation_collects_all_errors():
    with pytest.raises(ConfigurationError) as exc_info:
        ArchiveConfig(max_workers=0, item_timeout_seconds=-1, chunk_size=0)

    errors = exc_info.value.details["errors"]
    assert len(errors) == 3


def test_config_is_immutable():
    config = ArchiveConfig()

    with pytest.raises(AttributeError):
        config.max_workers = 10  # type: ignore[misc]


def test_with_updates_returns_new_validated_instance():
    config = ArchiveConfig()
    updated = config.with_updates(max_workers=8, compression=CompressionKind.NONE)

    assert updated.max_workers == 8
    assert updated.compression == CompressionKind.NONE
    assert config.max_workers == 3

    with pytest.raises(ConfigurationError):
        config.with_updates(max_workers=-2)


def test_builder_pipeline():
    config_dict = pipe(
        lambda c: with_backup_dir(c, "/srv/images"),
        lambda c: with_workers(c, 6),
        lambda c: with_compression(c, "NONE"),
        verbose_output,
    )(create_empty_config())

    config = build_config(config_dict)

    assert config.backup_dir == Path("/srv/images")
    assert config.max_workers == 6
    assert config.compression == CompressionKind.NONE
    assert config.verbose is True


def test_create_config_keyword_api():
    config = create_config(backup_dir="out", compression="gzip", engine_binary="podman")

    assert config.backup_dir == Path("out")
    assert config.engine_binary == "podman"


def test_create_config_from_env(monkeypatch):
    monkeypatch.setenv("IMGARCHIVE_BACKUP_DIR", "/var/backups/images")
    monkeypatch.setenv("IMGARCHIVE_WORKERS", "5")
    monkeypatch.setenv("IMGARCHIVE_COMPRESS", "none")
    monkeypatch.setenv("IMGARCHIVE_DOCKER_BIN", "podman")
    monkeypatch.setenv("IMGARCHIVE_ITEM_TIMEOUT", "600")

    config = create_config_from_env()

    assert config.backup_dir == Path("/var/backups/images")
    assert config.max_workers == 5
    assert config.compression == CompressionKind.NONE
    assert config.engine_binary == "podman"
    assert config.item_timeout_seconds == 600.0


def test_create_config_from_empty_env(monkeypatch):
    for name in [
        "IMGARCHIVE_BACKUP_DIR",
        "IMGARCHIVE_WORKERS",
        "IMGARCHIVE_COMPRESS",
        "IMGARCHIVE_DOCKER_BIN",
        "IMGARCHIVE_ITEM_TIMEOUT",
    ]:
        monkeypatch.delenv(name, raising=False)

    assert create_config_from_env() == ArchiveConfig()


@pytest.mark.parametrize(
    "name,value",
    [
        ("IMGARCHIVE_WORKERS", "zero"),
        ("IMGARCHIVE_WORKERS", "0"),
        ("IMGARCHIVE_COMPRESS", "bzip2"),
        ("IMGARCHIVE_ITEM_TIMEOUT", "-5"),
    ],
)
def test_invalid_env_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError) as exc_info:
        create_config_from_env()

    assert name in str(exc_info.value)
