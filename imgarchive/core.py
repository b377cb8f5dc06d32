# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Core - Bounded-concurrency batch orchestration.

run_batch() is generic: it runs an async task once per work item with at
most worker_limit tasks in flight and returns only after every item has
finished. Items are independent; one failure never cancels or blocks the
others. run_backup_batch() and run_restore_batch() bind the backup and
restore pipelines to it.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, UTC
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Sequence

import structlog

from imgarchive.config import ArchiveConfig
from imgarchive.errors import explain_backup_dir_unavailable, explain_no_work_items
from imgarchive.exceptions import ConfigurationError, FatalInputError

logger = structlog.get_logger()


@dataclass
class ItemOutcome:
    """Result of processing one work item."""

    item: str
    succeeded: bool
    detail: str = ""  # Archive path (backup) or engine output (restore)
    error: str | None = None
    duration_seconds: float = 0.0


@dataclass
class BatchResult:
    """Result of a whole batch."""

    operation_id: str  # ULID
    kind: str  # backup, restore
    outcomes: List[ItemOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)

    @property
    def failed_items(self) -> List[str]:
        return [o.item for o in self.outcomes if not o.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return self.failed_count == 0

    def by_item(self) -> Dict[str, List[ItemOutcome]]:
        """Map each work item to its outcomes, one per occurrence in the batch."""
        grouped: Dict[str, List[ItemOutcome]] = {}
        for outcome in self.outcomes:
            grouped.setdefault(outcome.item, []).append(outcome)
        return grouped


ItemTask = Callable[[str], Awaitable[ItemOutcome]]


async def run_batch(
    items: Sequence[str],
    task: ItemTask,
    worker_limit: int,
    *,
    kind: str = "batch",
    item_timeout_seconds: float | None = None,
) -> BatchResult:
    """
    Run a task for every item with bounded concurrency.

    Each item acquires a semaphore slot before its task starts and releases
    it when the task finishes, whether it succeeded or not. Outcomes are
    recorded in completion order.

    Args:
        items: Work items (each executed exactly once, duplicates included)
        task: Async callable returning an ItemOutcome
        worker_limit: Maximum tasks in flight
        kind: Label used in logs and the result
        item_timeout_seconds: Optional per-item time limit

    Returns:
        BatchResult with one outcome per item
    """
    from ulid import ULID

    if worker_limit < 1:
        raise ConfigurationError(
            f"worker_limit must be >= 1, got {worker_limit}",
            details={"worker_limit": worker_limit},
        )

    operation_id = str(ULID())
    start_time = datetime.now(UTC)
    outcomes: List[ItemOutcome] = []
    semaphore = asyncio.Semaphore(worker_limit)

    logger.info(
        "batch_started",
        operation_id=operation_id,
        kind=kind,
        items=len(items),
        workers=worker_limit,
    )

    async def run_item(item: str) -> None:
        async with semaphore:
            item_start = datetime.now(UTC)
            try:
                if item_timeout_seconds is not None:
                    outcome = await asyncio.wait_for(task(item), item_timeout_seconds)
                else:
                    outcome = await task(item)
            except asyncio.TimeoutError:
                logger.error(
                    "item_timed_out",
                    operation_id=operation_id,
                    item=item,
                    timeout=item_timeout_seconds,
                )
                outcome = ItemOutcome(
                    item=item,
                    succeeded=False,
                    error=f"Timed out after {item_timeout_seconds}s",
                )
            except Exception as e:
                logger.error(
                    "item_failed",
                    operation_id=operation_id,
                    item=item,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                outcome = ItemOutcome(item=item, succeeded=False, error=str(e))

            if not outcome.duration_seconds:
                outcome.duration_seconds = (datetime.now(UTC) - item_start).total_seconds()
            outcomes.append(outcome)

    await asyncio.gather(*[run_item(item) for item in items])

    result = BatchResult(
        operation_id=operation_id,
        kind=kind,
        outcomes=outcomes,
        duration_seconds=(datetime.now(UTC) - start_time).total_seconds(),
    )

    logger.info(
        "batch_completed",
        operation_id=operation_id,
        kind=kind,
        succeeded=result.succeeded_count,
        failed=result.failed_count,
        duration=result.duration_seconds,
    )

    return result


def prepare_backup_dir(backup_dir: Path) -> Path:
    """
    Create the backup directory if needed.

    Raises:
        FatalInputError: If the directory cannot be created
    """
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FatalInputError(
            explain_backup_dir_unavailable(backup_dir, e),
            details={"backup_dir": str(backup_dir)},
        ) from e
    return backup_dir


def _require_items(items: Sequence[str], kind: str) -> None:
    if not items:
        raise FatalInputError(explain_no_work_items(kind))


async def run_backup_batch(
    config: ArchiveConfig,
    engine,
    image_names: Sequence[str],
) -> BatchResult:
    """
    Back up every image in image_names.

    Raises:
        FatalInputError: If there are no images or the backup directory
            cannot be created (before any worker starts)
    """
    from imgarchive.backup.manager import backup_image

    _require_items(image_names, "backup")
    prepare_backup_dir(config.backup_dir)

    async def task(image_name: str) -> ItemOutcome:
        return await backup_image(config, engine, image_name)

    return await run_batch(
        image_names,
        task,
        config.max_workers,
        kind="backup",
        item_timeout_seconds=config.item_timeout_seconds,
    )


async def run_restore_batch(
    config: ArchiveConfig,
    engine,
    archive_paths: Sequence[str],
) -> BatchResult:
    """
    Restore every archive in archive_paths.

    Raises:
        FatalInputError: If there are no archive paths
    """
    from imgarchive.backup.restore import restore_archive

    _require_items(archive_paths, "restore")

    async def task(archive_path: str) -> ItemOutcome:
        return await restore_archive(config, engine, archive_path)

    return await run_batch(
        archive_paths,
        task,
        config.max_workers,
        kind="restore",
        item_timeout_seconds=config.item_timeout_seconds,
    )
