"""Scan and apply entry points.

The engine owns the only state that outlives a call, the scan cache, and
serializes scan and apply calls behind one lock so that concurrent callers
never walk and mutate the same tree at once.
"""

import logging
import threading
from typing import Callable, Optional

from diskcleaner.cache import ScanCache, make_key
from diskcleaner.collector import Collector
from diskcleaner.config import CleanerConfig
from diskcleaner.exceptions import ConfigurationError
from diskcleaner.executor import PlanExecutor
from diskcleaner.models import ApplyMode, ApplyResult, CleanupPlan, ScanOptions, ScanReport
from diskcleaner.plan import parse_plan
from diskcleaner.report import build_report
from diskcleaner.safety import SafetyPolicy
from diskcleaner.sizes import humanize
from diskcleaner.trash import TrashMover

logger = logging.getLogger(__name__)


class CleanerEngine:
    """Safety-scoped scan/report/apply engine for one home directory."""

    def __init__(
        self,
        config: CleanerConfig | None = None,
        cache: ScanCache | None = None,
        collector: Collector | None = None,
        trash_mover: TrashMover | None = None,
    ) -> None:
        self.config = config or CleanerConfig()
        self.policy = SafetyPolicy(self.config.home)
        self.cache = cache if cache is not None else ScanCache(self.config.cache_ttl_seconds)
        self.collector = collector or Collector(self.policy)
        self.executor = PlanExecutor(self.policy, trash_mover or TrashMover(self.config.trash_root))
        self._gate = threading.RLock()

    def default_options(self, categories) -> ScanOptions:
        """Scan options using the configured default filters."""
        return ScanOptions(
            categories=list(categories),
            min_size_bytes=self.config.default_min_size_bytes,
            min_age_days=self.config.default_min_age_days,
        )

    def scan(
        self,
        options: ScanOptions,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Callable[[str, str], None] | None = None,
    ) -> ScanReport:
        """
        Scan the selected categories and return a report.

        A report cached for equivalent options within the TTL is returned
        as is. An empty category selection produces an empty report without
        touching the filesystem.

        Raises:
            ScanCancelled: If ``cancel_event`` was set during the walk.
        """
        with self._gate:
            if not options.categories:
                logger.info("No categories selected, nothing to scan")
                return build_report(self.policy.home, [], [])

            key = make_key(
                self.policy.home, options.min_size_bytes, options.min_age_days, options.categories
            )
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Using cached report for %s", ",".join(c.value for c in options.categories))
                return cached

            logger.info("Scanning categories: %s", ",".join(c.value for c in options.categories))
            items = self.collector.scan(
                options, cancel_event=cancel_event, progress_callback=progress_callback
            )
            report = build_report(self.policy.home, options.categories, items)
            self.cache.put(key, report)

            logger.info(
                "Scan complete: %d items, %s total",
                report.totals.count,
                humanize(report.totals.bytes),
            )
            return report

    def apply(
        self,
        plan: CleanupPlan | str,
        mode: ApplyMode | str | None = None,
        dry_run: bool = True,
    ) -> ApplyResult:
        """
        Validate and execute a cleanup plan.

        Args:
            plan: Parsed plan, or raw plan text (JSON or one path per line)
            mode: Trash or delete; falls back to the plan's applyMode, then trash
            dry_run: If True (the default), only preview

        Returns:
            ApplyResult with one outcome per plan item

        Raises:
            PlanError: If raw plan text cannot be parsed. No item is processed.
            ConfigurationError: If the mode is not trash or delete.
        """
        if isinstance(plan, str):
            plan = parse_plan(plan)

        if mode is None:
            mode = plan.apply_mode or ApplyMode.TRASH
        try:
            mode = ApplyMode(mode)
        except ValueError:
            raise ConfigurationError(f"Invalid apply mode: {mode} (expected trash or delete)") from None

        with self._gate:
            logger.info(
                "Applying plan: %d items, mode=%s%s",
                len(plan.items),
                mode.value,
                " (dry run)" if dry_run else "",
            )
            try:
                return self.executor.execute(plan, mode=mode, dry_run=dry_run)
            finally:
                # Removals change files the cache cannot track individually
                self.cache.invalidate()
