"""
Artifact store - persists rendered output under a fixed root.
"""

import os
import posixpath
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pagefit.shared.errors import InvalidPathError
from pagefit.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredArtifact:
    path: Path
    size: int

    @property
    def filename(self) -> str:
        return self.path.name


class ArtifactStore:
    """Writes artifacts below ``root``; relative paths cannot climb out of it."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, relative: str) -> Path:
        """
        Map a caller-supplied relative path to a location inside the root.

        Leading ``..`` segments are dropped after normalization and absolute
        paths are re-rooted. Anything still escaping (e.g. via a symlink)
        raises InvalidPathError.
        """
        normalized = posixpath.normpath(relative.replace("\\", "/")).lstrip("/")
        parts = normalized.split("/")
        while parts and parts[0] == "..":
            parts.pop(0)
        parts = [p for p in parts if p not in ("", ".")]
        if not parts:
            raise InvalidPathError(relative)

        root = self.root.resolve()
        target = (root / Path(*parts)).resolve()
        if root not in target.parents:
            raise InvalidPathError(relative)
        return target

    def save(self, data: bytes, relative: str) -> StoredArtifact:
        """
        Atomic write: temp file in the destination directory, then rename.
        Existing files are replaced.
        """
        path = self.resolve(relative)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".tmp_{path.name}_")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info(f"Saved artifact {path} ({len(data)} bytes)")
        return StoredArtifact(path=path, size=len(data))
