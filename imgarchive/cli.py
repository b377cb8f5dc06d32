# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive CLI - backup, restore and list commands.

Exit codes:
    0  every item succeeded
    1  fatal input or configuration error, nothing was processed
    2  the batch ran but at least one item failed
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
import typer

from imgarchive.catalog import build_catalog, summarize_catalog
from imgarchive.config import ArchiveConfig, CompressionKind
from imgarchive.core import BatchResult, run_backup_batch, run_restore_batch
from imgarchive.engine import DockerCLIEngine, ImageEngine
from imgarchive.env import create_config_from_env
from imgarchive.exceptions import ConfigurationError, FatalInputError
from imgarchive.inputs import resolve_work_items

EXIT_FATAL = 1
EXIT_ITEMS_FAILED = 2

app = typer.Typer(
    help="Back up container images as tarballs and restore them when needed.",
    no_args_is_help=True,
)


def configure_logging(verbose: bool) -> None:
    """Send structured logs to stderr, at DEBUG when verbose."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def create_engine(config: ArchiveConfig) -> ImageEngine:
    return DockerCLIEngine(binary=config.engine_binary, chunk_size=config.chunk_size)


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, bold=True, err=True)
    raise typer.Exit(code=EXIT_FATAL)


def _load_config(**overrides) -> ArchiveConfig:
    """Environment configuration with command-line flags applied on top."""
    try:
        config = create_config_from_env()
        updates = {key: value for key, value in overrides.items() if value is not None}
        return config.with_updates(**updates) if updates else config
    except ConfigurationError as e:
        _fail(str(e))


def _report(result: BatchResult, action: str) -> None:
    for outcome in sorted(result.outcomes, key=lambda o: o.item):
        if outcome.succeeded:
            typer.secho(f"Successfully {action} {outcome.item}", fg=typer.colors.GREEN)
            if outcome.detail:
                typer.echo(f"  {outcome.detail}")
        else:
            typer.secho(f"Failed: {outcome.item}: {outcome.error}", fg=typer.colors.RED, err=True)

    typer.secho(
        f"All {result.kind} operations completed "
        f"({result.succeeded_count} succeeded, {result.failed_count} failed)",
        fg=typer.colors.GREEN if result.all_succeeded else typer.colors.YELLOW,
        bold=True,
    )

    if not result.all_succeeded:
        raise typer.Exit(code=EXIT_ITEMS_FAILED)


@app.command("backup")
def backup_cmd(
    images: Optional[List[str]] = typer.Argument(None, help="Image names to back up"),
    backup_dir: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Directory to store backups"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Maximum number of concurrent workers"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    compress: Optional[CompressionKind] = typer.Option(
        None, "--compress", "-c", help="Compression type", case_sensitive=False
    ),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read image names from file"),
    stdin: bool = typer.Option(False, "--stdin", "-s", help="Read image names from stdin"),
):
    """
    Back up Docker images as tarballs.
    """
    configure_logging(verbose)
    config = _load_config(
        backup_dir=backup_dir,
        max_workers=workers,
        compression=compress,
        verbose=verbose or None,
    )

    try:
        items = resolve_work_items("backup", images or [], file, stdin)
        result = asyncio.run(run_backup_batch(config, create_engine(config), items))
    except FatalInputError as e:
        _fail(str(e))

    _report(result, "backed up")


@app.command("restore")
def restore_cmd(
    archives: Optional[List[str]] = typer.Argument(None, help="Tarball paths to restore"),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Maximum number of concurrent workers"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read tarball paths from file"),
    stdin: bool = typer.Option(False, "--stdin", "-s", help="Read tarball paths from stdin"),
):
    """
    Restore Docker images from tarballs.
    """
    configure_logging(verbose)
    config = _load_config(max_workers=workers, verbose=verbose or None)

    try:
        items = resolve_work_items("restore", archives or [], file, stdin)
        result = asyncio.run(run_restore_batch(config, create_engine(config), items))
    except FatalInputError as e:
        _fail(str(e))

    _report(result, "restored")


@app.command("list")
def list_cmd(
    backup_dir: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Backup directory to list"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
):
    """
    List available backup images.
    """
    configure_logging(verbose)
    config = _load_config(backup_dir=backup_dir, verbose=verbose or None)

    try:
        entries = asyncio.run(build_catalog(config.backup_dir))
    except FatalInputError as e:
        _fail(str(e))

    if not entries:
        typer.secho("No backups found", fg=typer.colors.RED, bold=True)
        return

    typer.secho("Available Docker image backups:", fg=typer.colors.BLUE, bold=True)
    typer.echo("---------------------------------")

    for entry in entries:
        typer.echo(f"Backup: {entry.name}")
        typer.echo(f"  Size: {entry.size / (1024 * 1024):.2f} MB")
        typer.echo(f"  Date: {entry.modified_at.isoformat()}")

        if entry.metadata is not None:
            typer.echo(f"  Image: {entry.metadata.image_name}")
            typer.echo(f"  Tags: {', '.join(entry.metadata.tags)}")
            if config.verbose:
                typer.echo(f"  ID: {entry.metadata.image_id}")
                typer.echo(f"  Compression: {entry.metadata.compression_kind.value}")
        typer.echo()

    if config.verbose:
        summary = summarize_catalog(entries)
        typer.echo(
            f"{summary['archive_count']} archives, "
            f"{summary['total_bytes'] / (1024 * 1024):.2f} MB total, "
            f"{summary['orphan_count']} without metadata"
        )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
