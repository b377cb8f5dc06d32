# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for imgarchive tests.

Provides an in-memory container engine, temporary directories and test
configuration helpers.
"""

import hashlib
import tempfile
from pathlib import Path
from typing import Dict, Generator, List

import pytest
import structlog

from imgarchive.config import ArchiveConfig, CompressionKind
from imgarchive.engine import ImageDetails
from imgarchive.exceptions import EngineError


class FakeEngine:
    """In-memory ImageEngine: images are byte strings keyed by reference."""

    def __init__(self, images: Dict[str, bytes] | None = None) -> None:
        self.images = dict(images or {})
        self.failing_saves: set = set()
        self.fail_loads = False
        self.loaded: List[bytes] = []
        self.load_calls: List[str] = []  # "file" or "stream"

    async def inspect(self, reference: str) -> ImageDetails:
        if reference not in self.images:
            raise EngineError(
                f"No such image: {reference}",
                details={"returncode": 1, "output": f"Error: No such image: {reference}"},
            )
        data = self.images[reference]
        return ImageDetails(
            image_id="sha256:" + hashlib.sha256(data).hexdigest(),
            tags=(reference,),
            size=len(data),
        )

    async def save(self, reference: str, destination: Path) -> None:
        if reference in self.failing_saves:
            raise EngineError("Image save failed with exit code 1")
        Path(destination).write_bytes(self.images[reference])

    async def stream_save(self, reference: str):
        if reference in self.failing_saves:
            raise EngineError("Image save failed with exit code 1")
        data = self.images[reference]
        for i in range(0, len(data), 4096):
            yield data[i : i + 4096]

    async def load(self, source: Path) -> str:
        self.load_calls.append("file")
        if self.fail_loads:
            raise EngineError(
                "Image load failed with exit code 1",
                details={"output": "open /var/lib/docker/tmp: no space left on device"},
            )
        self.loaded.append(Path(source).read_bytes())
        return f"Loaded image from {Path(source).name}"

    async def load_stream(self, chunks) -> str:
        self.load_calls.append("stream")
        data = b"".join([chunk async for chunk in chunks])
        if self.fail_loads:
            raise EngineError(
                "Image load failed with exit code 1",
                details={"output": "invalid tar header"},
            )
        self.loaded.append(data)
        return "Loaded image from stdin"


def fake_image_bytes(name: str, size: int = 50_000) -> bytes:
    """Deterministic, compressible stand-in for a `docker save` tarball."""
    seed = hashlib.sha256(name.encode()).digest()
    return (seed * (size // len(seed) + 1))[:size]


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any logging configuration a CLI test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Engine holding two small images."""
    return FakeEngine(
        {
            "demo:1.0": fake_image_bytes("demo:1.0"),
            "registry.example.com/app:v2": fake_image_bytes("app:v2"),
        }
    )


@pytest.fixture
def test_config(temp_dir: Path) -> ArchiveConfig:
    """gzip configuration writing into a temporary backup directory."""
    return ArchiveConfig(
        backup_dir=temp_dir / "backups",
        max_workers=2,
        compression=CompressionKind.GZIP,
        chunk_size=8192,
    )


@pytest.fixture
def uncompressed_config(test_config: ArchiveConfig) -> ArchiveConfig:
    """Same as test_config but writing plain tarballs."""
    return test_config.with_updates(compression=CompressionKind.NONE)
