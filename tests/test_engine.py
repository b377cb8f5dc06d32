# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Engine Adapter Tests.

DockerCLIEngine is driven against a stub `docker` shell script, so these
tests need a POSIX shell but no container engine.
"""

import gzip
import stat
import sys
from pathlib import Path

import pytest

from imgarchive.engine import DockerCLIEngine
from imgarchive.exceptions import EngineError
from imgarchive.storage.compressor import iter_gunzip

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")


STUB_TEMPLATE = """#!/bin/sh
case "$1" in
  image)
    if [ "$3" = "demo:1.0" ]; then
      echo '[{{"Id": "sha256:abc", "RepoTags": ["demo:1.0", "demo:latest"], "Size": 42}}]'
    else
      echo "Error: No such image: $3" >&2
      exit 1
    fi
    ;;
  save)
    if [ "$2" = "-o" ]; then
      printf 'tar-bytes' > "$3"
    else
      printf 'tar-bytes'
    fi
    ;;
  load)
    if [ "$2" = "-i" ]; then
      echo "Loaded image: demo:1.0"
    else
      cat > "{sink}"
      echo "Loaded image: demo:1.0"
    fi
    ;;
  *)
    echo "unknown command: $1" >&2
    exit 1
    ;;
esac
"""


@pytest.fixture
def stub_docker(temp_dir: Path) -> Path:
    script = temp_dir / "docker"
    script.write_text(STUB_TEMPLATE.format(sink=temp_dir / "loaded.tar"))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def engine(stub_docker: Path) -> DockerCLIEngine:
    return DockerCLIEngine(binary=str(stub_docker), chunk_size=4)


@pytest.mark.asyncio
async def test_inspect_parses_engine_output(engine: DockerCLIEngine):
    details = await engine.inspect("demo:1.0")

    assert details.image_id == "sha256:abc"
    assert details.tags == ("demo:1.0", "demo:latest")
    assert details.size == 42


@pytest.mark.asyncio
async def test_inspect_unknown_image_raises(engine: DockerCLIEngine):
    with pytest.raises(EngineError) as exc_info:
        await engine.inspect("missing:1")

    assert exc_info.value.details["returncode"] == 1
    assert "No such image" in exc_info.value.details["output"]


@pytest.mark.asyncio
async def test_save_to_file(engine: DockerCLIEngine, temp_dir: Path):
    destination = temp_dir / "demo.tar"

    await engine.save("demo:1.0", destination)

    assert destination.read_bytes() == b"tar-bytes"


@pytest.mark.asyncio
async def test_stream_save_yields_all_bytes(engine: DockerCLIEngine):
    chunks = [chunk async for chunk in engine.stream_save("demo:1.0")]

    assert b"".join(chunks) == b"tar-bytes"


@pytest.mark.asyncio
async def test_load_from_file_returns_output(engine: DockerCLIEngine, temp_dir: Path):
    archive = temp_dir / "demo.tar"
    archive.write_bytes(b"tar-bytes")

    assert await engine.load(archive) == "Loaded image: demo:1.0"


@pytest.mark.asyncio
async def test_load_stream_feeds_decompressed_bytes(engine: DockerCLIEngine, temp_dir: Path):
    archive = temp_dir / "demo.tar.gz"
    archive.write_bytes(gzip.compress(b"tar-bytes" * 100))

    output = await engine.load_stream(iter_gunzip(archive, chunk_size=16))

    assert output == "Loaded image: demo:1.0"
    assert (temp_dir / "loaded.tar").read_bytes() == b"tar-bytes" * 100


@pytest.mark.asyncio
async def test_missing_binary_raises(temp_dir: Path):
    engine = DockerCLIEngine(binary=str(temp_dir / "no-such-docker"))

    with pytest.raises(EngineError) as exc_info:
        await engine.inspect("demo:1.0")

    assert "Failed to start" in str(exc_info.value)
