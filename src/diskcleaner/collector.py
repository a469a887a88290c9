"""Directory walker that turns category roots into scan items.

The walk uses an explicit stack instead of recursion because cache trees can
be very deep. Every entry is checked against the safety policy, symlinks are
never followed, and per-entry I/O errors are skipped so that a scan of a live
filesystem always returns a best-effort result.
"""

import logging
import os
import stat
import threading
import time
from pathlib import Path
from typing import Callable, Generator, Optional

from diskcleaner.categories import ResolvedRoot, resolve_roots
from diskcleaner.exceptions import ScanCancelled
from diskcleaner.models import Category, ScanItem, ScanOptions
from diskcleaner.safety import SafetyPolicy

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400

RootResolver = Callable[[Category, Path], list[ResolvedRoot]]


def matches_filters(size_bytes: int, mtime: float, options: ScanOptions, now: float) -> bool:
    """
    Apply the size and age filters to one file.

    Both filters are inclusive lower bounds; a zero filter imposes nothing.
    """
    if options.min_size_bytes and size_bytes < options.min_size_bytes:
        return False
    if options.min_age_days:
        age_days = (now - mtime) / SECONDS_PER_DAY
        if age_days < options.min_age_days:
            return False
    return True


class Collector:
    """Walks category roots under a safety policy and emits scan items."""

    def __init__(
        self,
        policy: SafetyPolicy,
        root_resolver: RootResolver = resolve_roots,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.policy = policy
        self._resolve_roots = root_resolver
        self._clock = clock

    def scan(
        self,
        options: ScanOptions,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Callable[[str, str], None] | None = None,
    ) -> list[ScanItem]:
        """
        Collect items for every requested category.

        Args:
            options: Effective categories and filters
            cancel_event: Checked at every traversal step; when set the scan stops
            progress_callback: Optional callback(category, root) as each root starts

        Returns:
            Items in category order, then traversal order. A path reachable
            from several categories is reported once, under the first.

        Raises:
            ScanCancelled: If ``cancel_event`` was set during the scan.
        """
        now = self._clock()
        items: list[ScanItem] = []
        seen_paths: set[str] = set()

        for category in options.categories:
            for root in self._resolve_roots(category, self.policy.home):
                _check_cancelled(cancel_event)

                if not self._admits_root(root.path):
                    logger.debug("Skipping root %s (not allowed)", root.path)
                    continue

                logger.debug("Scanning %s root %s", category.value, root.path)
                if progress_callback:
                    progress_callback(category.value, str(root.path))

                for item in self.walk(root, category, options, now, cancel_event):
                    if item.path in seen_paths:
                        continue
                    seen_paths.add(item.path)
                    items.append(item)

        return items

    def _admits_root(self, root: Path) -> bool:
        try:
            is_dir = stat.S_ISDIR(os.lstat(root).st_mode)
        except OSError:
            return False
        return is_dir and self.policy.allows(root)

    def walk(
        self,
        root: ResolvedRoot,
        category: Category,
        options: ScanOptions,
        now: float,
        cancel_event: Optional[threading.Event] = None,
    ) -> Generator[ScanItem, None, None]:
        """
        Walk one root depth-first, yielding files that pass the filters.

        Entries of each directory are visited in name order.
        """
        pending: list[str] = [str(root.path)]

        while pending:
            _check_cancelled(cancel_event)
            current = pending.pop()

            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                # Permission denied or vanished mid-walk
                logger.debug("Cannot list %s: %s", current, e)
                continue

            subdirs: list[str] = []
            for entry in entries:
                if not self.policy.admits_entry(entry.path):
                    continue

                try:
                    st = entry.stat(follow_symlinks=False)
                except OSError as e:
                    logger.debug("Cannot stat %s: %s", entry.path, e)
                    continue

                if stat.S_ISLNK(st.st_mode):
                    continue
                if stat.S_ISDIR(st.st_mode):
                    subdirs.append(entry.path)
                    continue
                if not stat.S_ISREG(st.st_mode):
                    continue

                if not matches_filters(st.st_size, st.st_mtime, options, now):
                    continue

                yield ScanItem(
                    path=entry.path,
                    size_bytes=st.st_size,
                    modified_at=int(st.st_mtime),
                    category=category,
                    reason=root.reason,
                )

            # Reversed so that the stack pops them in name order
            pending.extend(reversed(subdirs))


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ScanCancelled("Scan cancelled")
