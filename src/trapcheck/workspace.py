"""Temporary artifact directory for a suite run."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path


class ArtifactDir:
    """Holds files a suite writes while it runs (core images, debug.log).

    The directory is removed at the end of the run unless ``keep`` is set.
    """

    def __init__(self, base_dir: Path | str | None = None, keep: bool = False) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.keep = keep
        self.root: Path | None = None

    def create(self) -> Path:
        if self.base_dir is None:
            self.root = Path(tempfile.mkdtemp(prefix="trapcheck-"))
        else:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            self.root = Path(tempfile.mkdtemp(prefix="run-", dir=self.base_dir))
        return self.root

    def path(self, name: str) -> Path:
        """Path of an artifact inside the run directory."""
        if self.root is None:
            raise RuntimeError("artifact directory has not been created")
        return self.root / name

    def cleanup(self) -> bool:
        """Remove the run directory. Returns False when it was kept."""
        if self.root is None or self.keep:
            return False
        shutil.rmtree(self.root)
        self.root = None
        return True
