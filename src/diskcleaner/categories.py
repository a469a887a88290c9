"""Cleanup category definitions for diskcleaner."""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, NamedTuple, Optional

from pydantic import BaseModel, Field

from diskcleaner.exceptions import ConfigurationError
from diskcleaner.models import Category

logger = logging.getLogger(__name__)

# Categories scanned when the caller does not pass an explicit include list
DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category.USER_CACHES,
    Category.BROWSERS,
    Category.DEV,
    Category.PKG,
)

# Where Homebrew lives when it is not on PATH (Intel, Apple silicon)
BREW_CANDIDATES = ("/usr/local/bin/brew", "/opt/homebrew/bin/brew")

COMMAND_TIMEOUT = 30  # seconds


class RootSpec(BaseModel):
    """One candidate root directory of a category."""

    reason: str = Field(..., description="Why files under this root are cleanup candidates")
    path: Optional[str] = Field(
        None,
        description="Home-relative path ('~/...'); '*' components match any subdirectory",
    )
    command: list[str] = Field(
        default_factory=list,
        description="Command whose output is the root path (e.g. 'brew --cache')",
    )


class CategoryDefinition(BaseModel):
    """Definition of a cleanup category."""

    id: Category = Field(..., description="Category selector")
    name: str = Field(..., description="Human-readable name")
    description: str = Field(..., description="What this category contains")
    roots: list[RootSpec] = Field(default_factory=list, description="Roots in scan order")


class ResolvedRoot(NamedTuple):
    """A concrete directory to walk, with the reason attached to its files."""

    path: Path
    reason: str


# All cleanup categories with their roots, in scan order
CATEGORIES: dict[Category, CategoryDefinition] = {
    Category.USER_CACHES: CategoryDefinition(
        id=Category.USER_CACHES,
        name="User Caches",
        description="Per-application caches under ~/Library/Caches",
        roots=[RootSpec(path="~/Library/Caches", reason="User Library cache")],
    ),
    Category.BROWSERS: CategoryDefinition(
        id=Category.BROWSERS,
        name="Browser Caches",
        description="Safari, Chrome, Edge and Firefox caches (not history or passwords)",
        roots=[
            RootSpec(path="~/Library/Caches/com.apple.Safari", reason="Browser cache"),
            RootSpec(path="~/Library/Caches/Google/Chrome", reason="Browser cache"),
            RootSpec(path="~/Library/Caches/Microsoft Edge", reason="Browser cache"),
            RootSpec(path="~/Library/Caches/Firefox/Profiles", reason="Browser cache"),
        ],
    ),
    Category.DEV: CategoryDefinition(
        id=Category.DEV,
        name="Developer Caches",
        description="Xcode build products, device support files and simulator caches",
        roots=[
            RootSpec(path="~/Library/Developer/Xcode/DerivedData", reason="Developer cache"),
            RootSpec(path="~/Library/Developer/Xcode/iOS DeviceSupport", reason="Developer cache"),
            RootSpec(path="~/Library/Developer/CoreSimulator/Caches", reason="Developer cache"),
        ],
    ),
    Category.PKG: CategoryDefinition(
        id=Category.PKG,
        name="Package Manager Caches",
        description="Homebrew downloads and npm, Yarn, pnpm, pip and pipx caches",
        roots=[
            RootSpec(command=["brew", "--cache"], reason="Homebrew cache"),
            RootSpec(path="~/.npm/_cacache", reason="Package manager cache"),
            RootSpec(path="~/Library/Caches/npm", reason="Package manager cache"),
            RootSpec(path="~/Library/Caches/Yarn", reason="Package manager cache"),
            RootSpec(path="~/Library/pnpm/store", reason="Package manager cache"),
            RootSpec(path="~/Library/Caches/pnpm", reason="Package manager cache"),
            RootSpec(path="~/.cache/pip", reason="Package manager cache"),
            RootSpec(path="~/Library/Caches/pip", reason="Package manager cache"),
            RootSpec(path="~/.cache/pipx", reason="Package manager cache"),
        ],
    ),
    Category.DOWNLOADS: CategoryDefinition(
        id=Category.DOWNLOADS,
        name="Downloads",
        description="Files in ~/Downloads (review before removing)",
        roots=[RootSpec(path="~/Downloads", reason="Downloads item")],
    ),
    Category.DOCKER: CategoryDefinition(
        id=Category.DOCKER,
        name="Docker",
        description="Reserved; container data is not scanned",
        roots=[],
    ),
    Category.DEEP: CategoryDefinition(
        id=Category.DEEP,
        name="Deep Scan",
        description="App container caches, simulator device caches, Xcode archives and logs",
        roots=[
            RootSpec(
                path="~/Library/Containers/*/Data/Library/Caches",
                reason="App container cache",
            ),
            RootSpec(
                path="~/Library/Developer/CoreSimulator/Devices/*/data/Library/Caches",
                reason="Simulator device cache",
            ),
            RootSpec(path="~/Library/Developer/Xcode/Archives", reason="Xcode archive content"),
            RootSpec(path="~/Library/Logs", reason="Logs"),
        ],
    ),
}


def get_category(category_id: str) -> CategoryDefinition | None:
    """Get a category by selector name."""
    try:
        return CATEGORIES.get(Category(category_id))
    except ValueError:
        return None


def get_all_categories() -> list[CategoryDefinition]:
    """Get all categories."""
    return list(CATEGORIES.values())


def parse_category_list(value: str | Iterable[str] | None) -> list[Category]:
    """
    Parse a comma-separated (or already split) list of category names.

    Raises:
        ConfigurationError: On an unknown category name.
    """
    if value is None:
        return []
    names = value.split(",") if isinstance(value, str) else list(value)

    categories: list[Category] = []
    for name in names:
        name = str(name).strip()
        if not name:
            continue
        try:
            category = Category(name)
        except ValueError:
            valid = ", ".join(c.value for c in Category)
            raise ConfigurationError(f"Unknown category: {name} (valid: {valid})") from None
        if category not in categories:
            categories.append(category)
    return categories


def resolve_categories(
    include: str | Iterable[str] | None = None,
    exclude: str | Iterable[str] | None = None,
    downloads: bool = False,
    docker: bool = False,
) -> list[Category]:
    """
    Compute the effective category selection.

    Defaults are extended by the ``downloads``/``docker`` switches, replaced
    wholesale by a non-empty include list, then reduced by the exclude list.
    Resolution order is preserved.
    """
    categories = list(DEFAULT_CATEGORIES)
    if downloads:
        categories.append(Category.DOWNLOADS)
    if docker:
        categories.append(Category.DOCKER)

    included = parse_category_list(include)
    if included:
        categories = included

    excluded = set(parse_category_list(exclude))
    return [c for c in categories if c not in excluded]


def _find_executable(name: str) -> str | None:
    found = shutil.which(name)
    if found:
        return found
    if name == "brew":
        for candidate in BREW_CANDIDATES:
            if os.access(candidate, os.X_OK):
                return candidate
    return None


def query_command_path(command: list[str]) -> Path | None:
    """
    Ask an external tool for a directory (e.g. ``brew --cache``).

    Any failure (tool missing, non-zero exit, timeout, empty output) is not
    an error; the root is simply absent.
    """
    executable = _find_executable(command[0])
    if executable is None:
        logger.debug("%s not found, skipping its root", command[0])
        return None

    try:
        result = subprocess.run(
            [executable, *command[1:]],
            capture_output=True,
            text=True,
            timeout=COMMAND_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Could not run %s: %s", " ".join(command), e)
        return None

    output = result.stdout.strip()
    if result.returncode != 0 or not output:
        logger.debug("%s returned no path (exit %s)", " ".join(command), result.returncode)
        return None
    return Path(output.splitlines()[0].strip())


def _subdirectories(path: Path) -> list[Path]:
    """Real (non-link) subdirectories of a directory, sorted by name."""
    try:
        with os.scandir(path) as entries:
            return sorted(
                Path(entry.path) for entry in entries if entry.is_dir(follow_symlinks=False)
            )
    except OSError:
        return []


def expand_root_pattern(pattern: str, home: Path) -> list[Path]:
    """
    Expand a home-relative root pattern into existing directories.

    ``~`` maps to ``home`` (anything else is taken as absolute); a ``*``
    component matches every subdirectory, in name order.
    """
    if pattern == "~" or pattern.startswith("~/"):
        base, rest = home, pattern[2:]
    else:
        base, rest = Path("/"), pattern.lstrip("/")
    parts = [p for p in rest.split("/") if p]

    current = [base]
    for part in parts:
        expanded: list[Path] = []
        for candidate in current:
            if part == "*":
                expanded.extend(_subdirectories(candidate))
            else:
                expanded.append(candidate / part)
        current = expanded

    return [p for p in current if p.is_dir()]


def resolve_roots(category: Category, home: Path) -> list[ResolvedRoot]:
    """
    Resolve the concrete root directories of a category.

    Missing roots are dropped silently; the result is in declaration order.
    """
    definition = CATEGORIES[category]
    roots: list[ResolvedRoot] = []

    for spec in definition.roots:
        if spec.command:
            path = query_command_path(spec.command)
            if path is not None and path.is_dir():
                roots.append(ResolvedRoot(path, spec.reason))
        elif spec.path:
            for path in expand_root_pattern(spec.path, home):
                roots.append(ResolvedRoot(path, spec.reason))

    return roots
