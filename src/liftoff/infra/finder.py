"""Infrastructure: project root discovery.

A project root is the nearest directory, walking up from the start
directory, that contains a ``liftoff.yml`` file.  No files are created
or modified.
"""

from __future__ import annotations

from pathlib import Path

from liftoff.infra.config import CONFIG_FILENAME


class ProjectFinder:
    """Locate the project a command should operate on."""

    def __init__(self) -> None:
        self._root: Path | None = None

    @property
    def root(self) -> Path | None:
        """Resolved project root, or ``None`` when none was found."""
        return self._root

    @property
    def sites_dir(self) -> Path | None:
        if self._root is None:
            return None
        return self._root / "sites"

    def locate(self, start: Path) -> bool:
        """Search *start* and its parents for a project marker.

        Returns ``True`` and records the root when one is found.
        """
        start = start.expanduser().resolve()
        for candidate in (start, *start.parents):
            if (candidate / CONFIG_FILENAME).is_file():
                self._root = candidate
                return True
        return False

    def use_root(self, root: Path) -> None:
        """Accept an explicitly given root without searching."""
        self._root = root.expanduser().resolve()
