"""Validation and execution of user-approved cleanup plans.

Each plan item is handled on its own: it is re-checked against the live
filesystem and the safety policy, then previewed, trashed or deleted. A
failure on one item never stops the others and nothing is rolled back.
"""

import logging
import os
import shutil
import stat
from pathlib import Path

from diskcleaner.models import (
    ApplyMode,
    ApplyResult,
    ApplySummary,
    CleanupPlan,
    ItemOutcome,
    ItemStatus,
    PlanItem,
)
from diskcleaner.safety import SafetyPolicy
from diskcleaner.sizes import humanize
from diskcleaner.trash import TrashMover

logger = logging.getLogger(__name__)


def measure_path(path: str) -> int:
    """
    Read the current size of a path from the filesystem.

    Directories are summed without following symlinks; unreadable entries
    inside a directory are skipped.

    Raises:
        OSError: If the path itself cannot be stat'ed.
    """
    st = os.lstat(path)
    if not stat.S_ISDIR(st.st_mode):
        return st.st_size

    total = 0
    pending = [path]
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                        else:
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError:
            continue
    return total


def remove_path(path: str) -> None:
    """
    Permanently remove a path, recursively for directories.

    Raises:
        OSError: If removal fails.
    """
    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink()


class PlanExecutor:
    """Runs a cleanup plan item by item under the safety policy."""

    def __init__(self, policy: SafetyPolicy, trash_mover: TrashMover) -> None:
        self.policy = policy
        self.trash_mover = trash_mover

    def execute(self, plan: CleanupPlan, mode: ApplyMode, dry_run: bool) -> ApplyResult:
        """
        Execute (or simulate) a plan.

        Args:
            plan: Untrusted plan; only its paths are used
            mode: Trash or delete
            dry_run: If True, nothing is modified

        Returns:
            ApplyResult with one outcome per plan item, in plan order
        """
        details: list[ItemOutcome] = []
        total_bytes = 0
        count = 0

        for item in plan.items:
            outcome = self.process_item(item, mode, dry_run)
            details.append(outcome)
            if outcome.status.counts_toward_totals:
                count += 1
                total_bytes += outcome.bytes or 0

        if dry_run:
            logger.info("Apply (dry) complete: %d items, %s", count, humanize(total_bytes))
        else:
            logger.info("Apply complete: %d items, %s", count, humanize(total_bytes))

        return ApplyResult(
            ok=True,
            summary=ApplySummary(
                count=count,
                bytes=total_bytes,
                human_readable_size=humanize(total_bytes),
                mode=mode,
                dry_run=dry_run,
            ),
            details=details,
        )

    def process_item(self, item: PlanItem, mode: ApplyMode, dry_run: bool) -> ItemOutcome:
        """Move a single item from pending to its terminal status."""
        path = item.path

        def outcome(status: ItemStatus, **kwargs) -> ItemOutcome:
            return ItemOutcome(path=path, status=status, category=item.category, **kwargs)

        if not path:
            logger.warning("Missing: (empty path)")
            return outcome(ItemStatus.MISSING)

        if not os.path.isabs(path):
            logger.warning("Not an absolute path, skipping: %s", path)
            return outcome(ItemStatus.OUT_OF_SCOPE)

        if not os.path.lexists(path):
            logger.warning("Missing: %s", path)
            return outcome(ItemStatus.MISSING)

        decision = self.policy.evaluate(path)
        if not decision.in_scope or decision.via_symlink:
            logger.warning("Outside HOME, skipping: %s", path)
            return outcome(ItemStatus.OUT_OF_SCOPE)
        if decision.deny_listed:
            logger.warning("Deny-listed, skipping: %s", path)
            return outcome(ItemStatus.DENY_LISTED)
        if self.policy.contains_deny_listed(path):
            logger.warning("Contains deny-listed content, skipping: %s", path)
            return outcome(ItemStatus.DENY_LISTED)

        try:
            size = measure_path(path)
        except OSError as e:
            logger.error("Cannot read %s: %s", path, e)
            return outcome(ItemStatus.ERROR, error=str(e))

        if dry_run:
            logger.info("[DRY] Would %s: %s (%s)", mode.value, path, humanize(size))
            return outcome(ItemStatus.DRY_PREVIEWED, bytes=size, action=mode)

        if mode == ApplyMode.TRASH:
            try:
                destination = self.trash_mover.move_to_trash(path)
            except OSError as e:
                logger.error("Failed to trash: %s (%s)", path, e)
                return outcome(ItemStatus.ERROR, error=str(e))
            logger.info("Trashed: %s (%s)", path, humanize(size))
            return outcome(ItemStatus.TRASHED, bytes=size, destination=str(destination))

        try:
            remove_path(path)
        except OSError as e:
            logger.error("Failed to delete: %s (%s)", path, e)
            return outcome(ItemStatus.ERROR, error=str(e))
        logger.info("Deleted: %s (%s)", path, humanize(size))
        return outcome(ItemStatus.DELETED, bytes=size)
