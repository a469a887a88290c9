"""Report building and (de)serialization."""

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from diskcleaner.exceptions import ConfigurationError
from diskcleaner.models import Category, ReportTotals, ScanItem, ScanReport


def build_report(
    home: str | Path,
    categories: list[Category],
    items: list[ScanItem],
    generated_at: datetime | None = None,
) -> ScanReport:
    """
    Aggregate collected items into a report.

    Items are kept exactly in the order the collector produced them.

    Args:
        home: Home root the scan was scoped to
        categories: Effective categories in resolution order
        items: Collected items
        generated_at: Timestamp to stamp (default: now, UTC)

    Returns:
        ScanReport with totals computed from the items
    """
    totals = ReportTotals(
        count=len(items),
        bytes=sum(item.size_bytes for item in items),
    )
    return ScanReport(
        generated_at=generated_at or datetime.now(timezone.utc),
        home=str(home),
        totals=totals,
        categories=list(categories),
        items=list(items),
    )


def report_to_json(report: ScanReport, indent: int | None = 2) -> str:
    """Serialize a report to its JSON wire form."""
    return json.dumps(report.to_wire(), indent=indent)


def report_from_json(text: str) -> ScanReport:
    """
    Parse a report from its JSON wire form.

    Raises:
        ConfigurationError: If the text is not a valid report.
    """
    try:
        return ScanReport.model_validate_json(text)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid report: {e}") from e


def write_report(report: ScanReport, path: Path) -> Path:
    """Write a report as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report_to_json(report) + "\n", encoding="utf-8")
    return path


def read_report(path: Path) -> ScanReport:
    """
    Read a report written by ``write_report``.

    Raises:
        ConfigurationError: If the file cannot be read or is not a valid report.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read report {path}: {e}") from e
    return report_from_json(text)


def category_breakdown(report: ScanReport) -> dict[Category, ReportTotals]:
    """Per-category totals, in the report's category order."""
    breakdown = {category: ReportTotals() for category in report.categories}
    for item in report.items:
        totals = breakdown.setdefault(item.category, ReportTotals())
        totals.count += 1
        totals.bytes += item.size_bytes
    return breakdown
