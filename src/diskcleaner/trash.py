"""Collision-safe moves into the trash holding area."""

import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class TrashMover:
    """
    Moves paths into one trash directory without overwriting anything there.

    The destination keeps the source base name. When that name is taken a
    ``-YYYYmmdd-HHMMSS`` suffix is added, and when that is taken too (two
    collisions within one second) a counter is appended.
    """

    def __init__(self, trash_root: Path, clock: Callable[[], datetime] = datetime.now) -> None:
        self.trash_root = Path(trash_root)
        self._clock = clock
        self._lock = threading.Lock()

    def ensure_trash_root(self) -> Path:
        """Create the trash directory if it does not exist."""
        self.trash_root.mkdir(parents=True, exist_ok=True)
        return self.trash_root

    def destination_for(self, path: Path) -> Path:
        """Pick a free destination name for a source path."""
        name = path.name
        destination = self.trash_root / name
        if not os.path.lexists(destination):
            return destination

        stamped = f"{name}-{self._clock().strftime(TIMESTAMP_FORMAT)}"
        destination = self.trash_root / stamped
        counter = 1
        while os.path.lexists(destination):
            destination = self.trash_root / f"{stamped}-{counter}"
            counter += 1
        return destination

    def move_to_trash(self, path: str | Path) -> Path:
        """
        Move a file or directory into the trash.

        The move is a rename, so it is atomic on the same volume. Moving
        across volumes is not supported and fails with the rename error.

        Args:
            path: Path to move

        Returns:
            Destination path inside the trash

        Raises:
            OSError: If the trash cannot be created or the rename fails.
        """
        source = Path(path)
        with self._lock:
            self.ensure_trash_root()
            destination = self.destination_for(source)
            os.rename(source, destination)

        logger.debug("Moved %s -> %s", source, destination)
        return destination
