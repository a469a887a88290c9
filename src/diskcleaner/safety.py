"""Safety policy: decides whether a path may be scanned or mutated.

A path is allowed only when it lies strictly under the home directory, is not
inside a deny-listed subtree, and is not reached through a symbolic link.
The same policy is applied when scanning and again when applying a plan.
"""

import os
from pathlib import Path

from diskcleaner.models import SafetyDecision

# Subtrees of home that are never scanned or removed (segment-wise, case-insensitive)
DENY_LISTED_SUBTREES: tuple[tuple[str, ...], ...] = (
    ("Pictures",),
    ("Library", "Mail"),
    ("Library", "Mobile Documents"),  # iCloud Drive documents
    ("Desktop",),
    ("Documents",),
)

# Photo library bundles are protected wherever they live under home
DENY_LISTED_SUFFIXES: tuple[str, ...] = (".photoslibrary",)


def _lexical(path: str | os.PathLike) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


class SafetyPolicy:
    """Home-scope, deny-list and symlink checks for one home directory."""

    def __init__(self, home_root: str | os.PathLike) -> None:
        self.home_lexical = _lexical(home_root)
        self.home_real = os.path.realpath(self.home_lexical)
        self._bases = tuple(dict.fromkeys((self.home_lexical, self.home_real)))
        self._deny_prefixes = tuple(
            tuple(part.casefold() for part in subtree) for subtree in DENY_LISTED_SUBTREES
        )

    @property
    def home(self) -> Path:
        """Home root as given, made absolute and normalized."""
        return Path(self.home_lexical)

    def _locate(self, path: str) -> tuple[str, tuple[str, ...]] | None:
        """Home base and components below it of a normalized path, or None if not strictly under home."""
        for base in self._bases:
            if path == base:
                return None
            prefix = base if base.endswith(os.sep) else base + os.sep
            if path.startswith(prefix):
                return base, tuple(part for part in path[len(prefix):].split(os.sep) if part)
        return None

    def _relative_parts(self, path: str) -> tuple[str, ...] | None:
        located = self._locate(path)
        return located[1] if located else None

    def is_in_home_scope(self, path: str | os.PathLike, resolve: bool = True) -> bool:
        """
        Check that a path lies strictly under home.

        The path is normalized (``.`` and ``..`` removed) and, when ``resolve``
        is set, its symlink-resolved real path must be under home as well.
        Relative paths are never in scope.

        Args:
            path: Path to check
            resolve: Also check the real path (costs an lstat per component)

        Returns:
            True if the path is inside home and is not home itself
        """
        raw = os.fspath(path)
        if not raw or not os.path.isabs(raw):
            return False

        if self._relative_parts(_lexical(raw)) is None:
            return False

        if resolve:
            real = os.path.realpath(raw)
            if real == self.home_real or not real.startswith(self.home_real.rstrip(os.sep) + os.sep):
                return False

        return True

    def is_deny_listed(self, path: str | os.PathLike, resolve: bool = True) -> bool:
        """
        Check whether a path is inside a protected subtree of home.

        Matching is done on whole path segments, so ``~/Documents2`` is not
        protected while ``~/Documents`` and everything below it is.
        """
        raw = os.fspath(path)
        candidates = [_lexical(raw)]
        if resolve and os.path.isabs(raw):
            candidates.append(os.path.realpath(raw))

        for candidate in candidates:
            parts = self._relative_parts(candidate)
            if not parts:
                continue
            folded = tuple(part.casefold() for part in parts)
            for prefix in self._deny_prefixes:
                if folded[: len(prefix)] == prefix:
                    return True
            if any(part.endswith(DENY_LISTED_SUFFIXES) for part in folded):
                return True

        return False

    def contains_deny_listed(self, path: str | os.PathLike) -> bool:
        """
        Check whether removing a path would take protected content with it.

        True when a protected subtree lies below the path (``~/Library``
        holds ``~/Library/Mail``) or when the directory contains a photo
        library bundle anywhere inside it. Links are not followed.
        """
        raw = os.fspath(path)
        parts = self._relative_parts(_lexical(raw))
        if parts is None:
            return False

        folded = tuple(part.casefold() for part in parts)
        for prefix in self._deny_prefixes:
            if len(prefix) > len(folded) and prefix[: len(folded)] == folded:
                return True

        if os.path.islink(raw) or not os.path.isdir(raw):
            return False

        pending = [raw]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as entries:
                    for entry in entries:
                        if entry.name.casefold().endswith(DENY_LISTED_SUFFIXES):
                            return True
                        try:
                            if entry.is_dir(follow_symlinks=False):
                                pending.append(entry.path)
                        except OSError:
                            continue
            except OSError:
                continue
        return False

    def passes_through_symlink(self, path: str | os.PathLike) -> bool:
        """
        Check whether a path is, or is reached through, a symbolic link.

        The path is walked as written, before ``..`` segments are collapsed,
        because that is how the kernel resolves it. Only components below
        home are inspected; the home root itself may be a link
        (e.g. /home -> /usr/home).
        """
        raw = os.fspath(path)
        if not os.path.isabs(raw):
            raw = os.path.join(os.getcwd(), raw)

        current = os.sep
        for part in raw.split(os.sep):
            if part in ("", "."):
                continue
            current = os.path.join(current, part)
            if part == "..":
                continue
            if self._locate(_lexical(current)) is None:
                continue
            if os.path.islink(current):
                return True
            if not os.path.lexists(current):
                # Nothing below a missing component can be a link
                return False
        return False

    def evaluate(self, path: str | os.PathLike) -> SafetyDecision:
        """Evaluate all safety checks for a path."""
        raw = os.fspath(path)
        in_scope = self.is_in_home_scope(raw)
        return SafetyDecision(
            path=raw,
            in_scope=in_scope,
            deny_listed=self.is_deny_listed(raw),
            via_symlink=in_scope and self.passes_through_symlink(raw),
        )

    def allows(self, path: str | os.PathLike) -> bool:
        """Whether a path may be scanned or mutated."""
        return self.evaluate(path).allowed

    def admits_entry(self, path: str) -> bool:
        """
        Cheap check for an entry found while walking an already-admitted directory.

        The walker never follows links, so only the lexical scope and the
        deny-list need to be checked per entry.
        """
        return self.is_in_home_scope(path, resolve=False) and not self.is_deny_listed(path, resolve=False)
