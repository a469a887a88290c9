"""End-to-end tests for the scan and apply entry points."""

import json
import os
import threading
import time
from unittest.mock import MagicMock

import pytest

from conftest import MB, make_file
from diskcleaner.cache import ScanCache
from diskcleaner.config import CleanerConfig
from diskcleaner.engine import CleanerEngine
from diskcleaner.exceptions import ConfigurationError, PlanError, ScanCancelled
from diskcleaner.models import (
    ApplyMode,
    Category,
    CleanupPlan,
    ItemStatus,
    PlanItem,
    ScanOptions,
)
from diskcleaner.report import report_from_json, report_to_json


def _user_caches(min_size=0, min_age=0) -> ScanOptions:
    return ScanOptions(
        categories=[Category.USER_CACHES], min_size_bytes=min_size, min_age_days=min_age
    )


def _plan_from(report, *extra_paths) -> CleanupPlan:
    items = [PlanItem(path=item.path, category=item.category.value) for item in report.items]
    items.extend(PlanItem(path=str(p)) for p in extra_paths)
    return CleanupPlan(items=items)


class TestScan:
    def test_filtered_scan(self, engine, caches):
        now = time.time()
        big = make_file(caches / "big.bin", 60 * MB, age_days=40, now=now)
        make_file(caches / "small.bin", 10 * MB, age_days=40, now=now)

        report = engine.scan(_user_caches(min_size=52428800, min_age=30))

        assert [item.path for item in report.items] == [str(big)]
        assert report.totals.count == 1
        assert report.totals.bytes == 60 * MB
        assert report.categories == [Category.USER_CACHES]
        assert report.home == str(engine.policy.home)

    def test_totals_match_items(self, engine, caches):
        for i, size in enumerate([3, 5, 7]):
            make_file(caches / f"d{i}" / "f", size)

        report = engine.scan(_user_caches())

        assert report.totals.count == len(report.items) == 3
        assert report.totals.bytes == sum(item.size_bytes for item in report.items) == 15

    def test_items_are_safe(self, engine, home, caches):
        make_file(caches / "ok.bin", 1)
        make_file(home / "Library" / "Logs" / "x.log", 1)
        make_file(home / "Documents" / "y", 1)

        report = engine.scan(
            ScanOptions(categories=[Category.USER_CACHES, Category.DEEP, Category.DOWNLOADS])
        )

        assert report.items
        for item in report.items:
            assert engine.policy.is_in_home_scope(item.path)
            assert not engine.policy.is_deny_listed(item.path)

    def test_repeat_scan_is_identical(self, config, caches):
        make_file(caches / "a" / "1", 1)
        make_file(caches / "b" / "2", 2)

        first = CleanerEngine(config).scan(_user_caches())
        second = CleanerEngine(config).scan(_user_caches())

        assert first.items == second.items
        assert first.totals == second.totals

    def test_cached_report_reused(self, engine, caches):
        make_file(caches / "a.bin", 1)
        first = engine.scan(_user_caches())
        make_file(caches / "b.bin", 1)

        assert engine.scan(_user_caches()) is first

    def test_expired_cache_rescans(self, config, caches):
        clock = MagicMock(return_value=0.0)
        engine = CleanerEngine(config, cache=ScanCache(ttl_seconds=300, clock=clock))
        make_file(caches / "a.bin", 1)
        engine.scan(_user_caches())
        make_file(caches / "b.bin", 1)

        clock.return_value = 301.0
        assert engine.scan(_user_caches()).totals.count == 2

    def test_shared_cache_keeps_homes_apart(self, home, caches, tmp_path):
        other_home = tmp_path.resolve() / "other-home"
        make_file(caches / "a.bin", 1)
        make_file(other_home / "Library" / "Caches" / "b.bin", 1)
        cache = ScanCache()

        first = CleanerEngine(CleanerConfig(home=home), cache=cache).scan(_user_caches())
        second = CleanerEngine(CleanerConfig(home=other_home), cache=cache).scan(_user_caches())

        assert [os.path.basename(i.path) for i in first.items] == ["a.bin"]
        assert [os.path.basename(i.path) for i in second.items] == ["b.bin"]
        assert second.home == str(other_home)

    def test_no_categories(self, engine, caches):
        make_file(caches / "a.bin", 1)

        report = engine.scan(ScanOptions(categories=[]))

        assert report.items == []
        assert report.categories == []
        assert len(engine.cache) == 0

    def test_cancellation(self, engine, caches):
        make_file(caches / "a.bin", 1)
        event = threading.Event()
        event.set()

        with pytest.raises(ScanCancelled):
            engine.scan(_user_caches(), cancel_event=event)
        assert len(engine.cache) == 0

    def test_default_options(self, engine):
        options = engine.default_options([Category.DEV])
        assert options.min_size_bytes == 50 * MB
        assert options.min_age_days == 30


class TestApply:
    def test_dry_run_changes_nothing(self, engine, caches):
        make_file(caches / "a.bin", 10)
        make_file(caches / "d" / "b.bin", 20)
        report = engine.scan(_user_caches())
        before = {item.path: os.path.getsize(item.path) for item in report.items}

        result = engine.apply(_plan_from(report), dry_run=True)

        assert {path: os.path.getsize(path) for path in before} == before
        assert result.summary.dry_run is True
        assert result.summary.count == 2
        assert result.summary.bytes == 30

    def test_trash_apply(self, engine, config, caches):
        make_file(caches / "only.bin", 1234)
        report = engine.scan(_user_caches())

        result = engine.apply(_plan_from(report), mode=ApplyMode.TRASH, dry_run=False)

        assert result.details[0].status == ItemStatus.TRASHED
        assert not (caches / "only.bin").exists()
        entries = os.listdir(config.trash_root)
        assert entries == ["only.bin"]
        assert (config.trash_root / "only.bin").stat().st_size == 1234

    def test_delete_dry_run(self, engine, caches):
        target = make_file(caches / "a.bin", 5)

        result = engine.apply(CleanupPlan(items=[PlanItem(path=str(target))]), mode="delete")

        assert result.details[0].status == ItemStatus.DRY_PREVIEWED
        assert result.summary.mode == ApplyMode.DELETE
        assert target.exists()

    def test_stale_report_with_protected_path(self, engine, home, caches):
        make_file(caches / "a.bin", 5)
        doc = make_file(home / "Documents" / "taxes.pdf", 5)
        report = engine.scan(_user_caches())

        result = engine.apply(_plan_from(report, doc), mode=ApplyMode.TRASH, dry_run=False)

        assert [o.status for o in result.details] == [ItemStatus.TRASHED, ItemStatus.DENY_LISTED]
        assert doc.exists()
        assert result.summary.count == 1

    def test_file_removed_after_scan(self, engine, caches):
        target = make_file(caches / "a.bin", 5)
        report = engine.scan(_user_caches())
        target.unlink()

        result = engine.apply(_plan_from(report), dry_run=False)

        assert result.details[0].status == ItemStatus.MISSING
        assert result.summary.count == 0

    def test_size_measured_at_apply_time(self, engine, caches):
        target = make_file(caches / "a.bin", 5)
        report = engine.scan(_user_caches())
        make_file(target, 50)

        result = engine.apply(_plan_from(report), dry_run=True)

        assert result.details[0].bytes == 50

    def test_apply_invalidates_cache(self, engine, caches):
        make_file(caches / "a.bin", 1)
        engine.scan(_user_caches())
        assert len(engine.cache) == 1

        engine.apply(CleanupPlan(items=[]), dry_run=True)

        assert len(engine.cache) == 0

    def test_report_round_trip_into_apply(self, engine, caches):
        make_file(caches / "a.bin", 9)
        text = report_to_json(engine.scan(_user_caches()))

        result = engine.apply(_plan_from(report_from_json(text)), dry_run=True)

        assert result.summary.bytes == 9


class TestApplyMode:
    def test_defaults_to_trash(self, engine):
        assert engine.apply(CleanupPlan(items=[])).summary.mode == ApplyMode.TRASH

    def test_plan_mode_used(self, engine):
        plan = CleanupPlan(items=[], apply_mode=ApplyMode.DELETE)
        assert engine.apply(plan).summary.mode == ApplyMode.DELETE

    def test_explicit_mode_wins(self, engine):
        plan = CleanupPlan(items=[], apply_mode=ApplyMode.DELETE)
        assert engine.apply(plan, mode=ApplyMode.TRASH).summary.mode == ApplyMode.TRASH

    def test_invalid_mode(self, engine):
        with pytest.raises(ConfigurationError, match="Invalid apply mode"):
            engine.apply(CleanupPlan(items=[]), mode="shred")


class TestApplyPlanText:
    def test_json_text(self, engine, caches):
        target = make_file(caches / "a.bin", 3)
        text = json.dumps({"items": [{"path": str(target)}], "applyMode": "delete"})

        result = engine.apply(text, dry_run=False)

        assert result.details[0].status == ItemStatus.DELETED
        assert not target.exists()

    def test_plain_text(self, engine, caches):
        target = make_file(caches / "a.bin", 3)

        result = engine.apply(f"# plan\n{target}\n", dry_run=True)

        assert result.details[0].status == ItemStatus.DRY_PREVIEWED

    def test_malformed_plan_processes_nothing(self, engine, caches):
        target = make_file(caches / "a.bin", 3)

        with pytest.raises(PlanError):
            engine.apply('{"items": [{"path": "%s"}' % target, dry_run=False)
        assert target.exists()


class TestConfiguredTrash:
    def test_custom_trash_dir(self, home, caches):
        config = CleanerConfig(home=home, trash_dir=home / "holding")
        target = make_file(caches / "a.bin", 3)

        result = CleanerEngine(config).apply(
            CleanupPlan(items=[PlanItem(path=str(target))]), dry_run=False
        )

        assert result.details[0].destination == str(home / "holding" / "a.bin")
