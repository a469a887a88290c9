"""Data models for diskcleaner."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Category(str, Enum):
    """Named groups of cleanup roots."""

    USER_CACHES = "user-caches"
    BROWSERS = "browsers"
    DEV = "dev"
    PKG = "pkg"
    DOWNLOADS = "downloads"
    DOCKER = "docker"  # Reserved, never yields items
    DEEP = "deep"


class ApplyMode(str, Enum):
    """How approved items are removed."""

    TRASH = "trash"
    DELETE = "delete"


class ItemStatus(str, Enum):
    """Terminal status of a single plan item."""

    DRY_PREVIEWED = "dry_previewed"
    TRASHED = "trashed"
    DELETED = "deleted"
    MISSING = "missing"
    OUT_OF_SCOPE = "out_of_scope"
    DENY_LISTED = "deny_listed"
    ERROR = "error"

    @property
    def counts_toward_totals(self) -> bool:
        """Whether items in this status are added to the apply summary."""
        return self in (ItemStatus.DRY_PREVIEWED, ItemStatus.TRASHED, ItemStatus.DELETED)


class WireModel(BaseModel):
    """Base for models exchanged as JSON (accepts wire or attribute names)."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump using wire names and JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Scan side
# =============================================================================


class ScanItem(WireModel):
    """A single reclaimable file found by a scan."""

    path: str = Field(..., description="Absolute path, unique within one report")
    size_bytes: int = Field(..., ge=0, alias="bytes", description="Size in bytes")
    modified_at: int = Field(..., alias="mtime", description="Modification time (epoch seconds)")
    category: Category = Field(..., description="Category that produced this item")
    reason: str = Field(..., description="Why this file is a cleanup candidate")
    trashable: bool = Field(True, description="Whether the item may be moved to trash")


class ReportTotals(BaseModel):
    """Aggregate count and size of a report."""

    count: int = Field(0, ge=0)
    bytes: int = Field(0, ge=0)


class ScanReport(WireModel):
    """Canonical result of one scan."""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="generatedAt"
    )
    home: str = Field(..., description="Home root the scan was scoped to")
    totals: ReportTotals = Field(default_factory=ReportTotals)
    categories: list[Category] = Field(
        default_factory=list, description="Effective categories in resolution order"
    )
    items: list[ScanItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_totals(self) -> "ScanReport":
        """Totals must always agree with the item list."""
        expected_bytes = sum(item.size_bytes for item in self.items)
        if self.totals.count != len(self.items) or self.totals.bytes != expected_bytes:
            msg = (
                f"Report totals ({self.totals.count} items, {self.totals.bytes} bytes) do not "
                f"match items ({len(self.items)} items, {expected_bytes} bytes)"
            )
            raise ValueError(msg)
        return self

    def items_in(self, category: Category) -> list[ScanItem]:
        """Items produced by a single category."""
        return [item for item in self.items if item.category == category]


class ScanOptions(BaseModel):
    """Effective parameters of one scan call."""

    categories: list[Category] = Field(default_factory=list)
    min_size_bytes: int = Field(0, ge=0, description="Inclusive minimum size; 0 means unset")
    min_age_days: float = Field(0, ge=0, description="Inclusive minimum age; 0 means unset")


# =============================================================================
# Apply side
# =============================================================================


class PlanItem(WireModel):
    """One path the user approved for removal. Untrusted."""

    path: str = Field(..., description="Path to remove")
    category: Optional[str] = Field(None, description="Declared category (informational)")


class CleanupPlan(WireModel):
    """An externally produced removal plan."""

    items: list[PlanItem] = Field(default_factory=list)
    apply_mode: Optional[ApplyMode] = Field(None, alias="applyMode")

    @property
    def paths(self) -> list[str]:
        """Paths in plan order."""
        return [item.path for item in self.items]


class ItemOutcome(WireModel):
    """Result of processing one plan item."""

    path: str
    status: ItemStatus
    category: Optional[str] = None
    bytes: Optional[int] = None
    action: Optional[ApplyMode] = Field(None, description="Mode previewed by a dry run")
    destination: Optional[str] = Field(None, description="Where a trashed item ended up")
    error: Optional[str] = None

    def to_wire(self) -> dict:
        """Dump using wire names, leaving out fields that do not apply."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ApplySummary(WireModel):
    """Aggregate of the items that were removed or previewed."""

    count: int = 0
    bytes: int = 0
    human_readable_size: str = Field("0.00 B", alias="humanReadableSize")
    mode: ApplyMode = ApplyMode.TRASH
    dry_run: bool = Field(True, alias="dryRun")


class ApplyResult(WireModel):
    """Result of one apply call."""

    ok: bool = True
    summary: ApplySummary = Field(default_factory=ApplySummary)
    details: list[ItemOutcome] = Field(default_factory=list)

    def to_wire(self) -> dict:
        """Dump using wire names; detail entries omit unset fields."""
        return {
            "ok": self.ok,
            "summary": self.summary.to_wire(),
            "details": [outcome.to_wire() for outcome in self.details],
        }

    def by_status(self, status: ItemStatus) -> list[ItemOutcome]:
        """Outcomes with the given status."""
        return [outcome for outcome in self.details if outcome.status == status]


class SafetyDecision(BaseModel):
    """Evaluation of a single path against the safety policy."""

    path: str
    in_scope: bool
    deny_listed: bool
    via_symlink: bool = False

    @property
    def allowed(self) -> bool:
        """Whether the path may be scanned or mutated."""
        return self.in_scope and not self.deny_listed and not self.via_symlink
