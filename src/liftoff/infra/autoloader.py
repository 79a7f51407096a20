"""Infrastructure: site-specific import paths.

A project may ship Python code under ``<root>/lib`` that its command
files import.  Loading the site autoloader puts that directory at the
front of ``sys.path`` for the rest of the process.
"""

from __future__ import annotations

import sys
from pathlib import Path

SITE_LIB_DIRNAME: str = "lib"


class SiteAutoloader:
    """Handle describing the import paths added for one project.

    A loader created without a root is an identity no-op.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root: Path | None = root
        self.added: list[str] = []

    def load(self) -> SiteAutoloader:
        if self.root is None:
            return self
        lib = self.root / SITE_LIB_DIRNAME
        entry = str(lib)
        if lib.is_dir() and entry not in sys.path:
            sys.path.insert(0, entry)
            self.added.append(entry)
        return self

    def unload(self) -> None:
        """Remove every path this loader added."""
        for entry in self.added:
            if entry in sys.path:
                sys.path.remove(entry)
        self.added.clear()
