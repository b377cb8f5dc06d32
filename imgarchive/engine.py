# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Engine - Container engine adapter.

The pipelines only talk to the engine through the ImageEngine protocol.
DockerCLIEngine implements it by running the `docker` executable (or any
CLI-compatible engine such as podman) as asyncio subprocesses, so several
saves and loads run in parallel at the OS level while the event loop only
moves bytes between pipes and files.
"""

import asyncio
import json
from asyncio.subprocess import PIPE, STDOUT
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, List, Protocol, Tuple

import structlog

from imgarchive.config import DEFAULT_CHUNK_SIZE
from imgarchive.exceptions import EngineError

logger = structlog.get_logger()


@dataclass(frozen=True)
class ImageDetails:
    """What the engine reports about a local image."""

    image_id: str
    tags: Tuple[str, ...]
    size: int


class ImageEngine(Protocol):
    """Operations the backup and restore pipelines need from an engine."""

    async def inspect(self, reference: str) -> ImageDetails:
        ...

    async def save(self, reference: str, destination: Path) -> None:
        ...

    def stream_save(self, reference: str) -> AsyncIterator[bytes]:
        ...

    async def load(self, source: Path) -> str:
        ...

    async def load_stream(self, chunks: AsyncIterator[bytes]) -> str:
        ...


async def _reap(proc: asyncio.subprocess.Process) -> None:
    """Kill a still-running subprocess and wait for it to exit."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()


def _decode(output: bytes) -> str:
    return output.decode("utf-8", errors="replace").strip()


class DockerCLIEngine:
    """ImageEngine backed by the docker command-line client."""

    def __init__(self, binary: str = "docker", chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """
        Initialize the engine adapter.

        Args:
            binary: Engine executable name or path
            chunk_size: Read size for streamed save output
        """
        self.binary = binary
        self.chunk_size = chunk_size

    async def _spawn(self, args: List[str], **kwargs) -> asyncio.subprocess.Process:
        logger.debug("engine_command", command=[self.binary, *args])
        try:
            return await asyncio.create_subprocess_exec(self.binary, *args, **kwargs)
        except OSError as e:
            raise EngineError(
                f"Failed to start {self.binary}: {e}",
                details={"command": [self.binary, *args]},
            ) from e

    async def _run(self, args: List[str], merge_output: bool = False) -> Tuple[int, bytes, bytes]:
        proc = await self._spawn(
            args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=PIPE,
            stderr=STDOUT if merge_output else PIPE,
        )
        try:
            stdout, stderr = await proc.communicate()
        finally:
            await _reap(proc)
        return proc.returncode, stdout, stderr or b""

    def _failure(self, action: str, args: List[str], returncode: int, output: bytes) -> EngineError:
        return EngineError(
            f"{action} failed with exit code {returncode}",
            details={
                "command": [self.binary, *args],
                "returncode": returncode,
                "output": _decode(output),
            },
        )

    async def inspect(self, reference: str) -> ImageDetails:
        """
        Describe a local image.

        Raises:
            EngineError: If the image is unknown or the output is unreadable
        """
        args = ["image", "inspect", reference]
        returncode, stdout, stderr = await self._run(args)
        if returncode != 0:
            raise self._failure("Image inspect", args, returncode, stderr)

        try:
            entry = json.loads(stdout)[0]
            return ImageDetails(
                image_id=entry.get("Id", ""),
                tags=tuple(entry.get("RepoTags") or ()),
                size=int(entry.get("Size") or 0),
            )
        except (ValueError, IndexError, KeyError, TypeError, AttributeError) as e:
            raise EngineError(
                f"Unreadable inspect output for {reference}: {e}",
                details={"command": [self.binary, *args]},
            ) from e

    async def save(self, reference: str, destination: Path) -> None:
        """
        Save an image straight into a tar file.

        Raises:
            EngineError: If the save fails
        """
        args = ["save", "-o", str(destination), reference]
        returncode, _, output = await self._run(args)
        if returncode != 0:
            raise self._failure("Image save", args, returncode, output)

    async def stream_save(self, reference: str) -> AsyncIterator[bytes]:
        """
        Yield the raw tar stream of an image.

        Raises:
            EngineError: If the save exits non-zero (after the stream ends)
        """
        args = ["save", reference]
        proc = await self._spawn(
            args, stdin=asyncio.subprocess.DEVNULL, stdout=PIPE, stderr=PIPE
        )
        stderr_task = asyncio.ensure_future(proc.stderr.read())

        try:
            while True:
                chunk = await proc.stdout.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk

            returncode = await proc.wait()
            stderr = await stderr_task
            if returncode != 0:
                raise self._failure("Image save", args, returncode, stderr)
        finally:
            await _reap(proc)
            if not stderr_task.done():
                stderr_task.cancel()

    async def load(self, source: Path) -> str:
        """
        Load an uncompressed archive into the engine.

        Returns:
            Combined stdout/stderr of the load

        Raises:
            EngineError: If the load fails
        """
        args = ["load", "-i", str(source)]
        returncode, output, _ = await self._run(args, merge_output=True)
        if returncode != 0:
            raise self._failure("Image load", args, returncode, output)
        return _decode(output)

    async def load_stream(self, chunks: AsyncIterator[bytes]) -> str:
        """
        Load an archive fed on stdin.

        Errors raised by the chunk source kill the load and propagate.

        Returns:
            Combined stdout/stderr of the load

        Raises:
            EngineError: If the load fails
        """
        args = ["load"]
        proc = await self._spawn(args, stdin=PIPE, stdout=PIPE, stderr=STDOUT)
        output_task = asyncio.ensure_future(proc.stdout.read())

        try:
            try:
                async for chunk in chunks:
                    proc.stdin.write(chunk)
                    await proc.stdin.drain()
                proc.stdin.close()
                await proc.stdin.wait_closed()
            except (BrokenPipeError, ConnectionResetError):
                # The engine stopped reading; its exit status tells why
                pass

            output = await output_task
            returncode = await proc.wait()
        finally:
            await _reap(proc)
            if not output_task.done():
                output_task.cancel()

        if returncode != 0:
            raise self._failure("Image load", args, returncode, output)
        return _decode(output)
