"""Content loading for orgsite.

This module discovers post sources under the content directory, parses them
and stores the documents in a Model. It also applies single-file changes to a
ModelStore so a running site can follow edits and deletions.

Key classes and functions:
- SourceLoader: Discovers post source files.
- load_model: Parse every source into a fresh Model.
- refresh: Re-parse or drop one source in a ModelStore.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .model import Model, ModelStore
from .pandoc import ParseError, parse_file

logger = logging.getLogger(__name__)


class SourceLoader:
    """Discovers post source files in a content directory.

    Static directories and any path component starting with "_" or "."
    are skipped.

    Attributes:
        content_dir: Directory containing site content.
        source_ext: Extension of post sources.
        static_dirs: Top-level directories holding static files.
    """

    def __init__(
        self,
        content_dir: Path,
        source_ext: str = ".org",
        static_dirs: Sequence[str] = ("assets", "images"),
    ):
        self.content_dir = content_dir
        self.source_ext = source_ext
        self.static_dirs = tuple(static_dirs)

    def post_id(self, path: Path) -> str:
        """Return the id of a source file: its POSIX path relative to the content dir."""
        return path.relative_to(self.content_dir).as_posix()

    def is_source(self, path: Path) -> bool:
        """Check whether ``path`` is a post source this loader would pick up.

        Args:
            path: Path to check, possibly outside the content directory.

        Returns:
            True if the file has the source extension and is not static or hidden.
        """
        if path.suffix != self.source_ext or not path.is_relative_to(self.content_dir):
            return False
        parts = path.relative_to(self.content_dir).parts
        if parts[0] in self.static_dirs:
            return False
        return not any(part.startswith(("_", ".")) for part in parts)

    def iter_files(self) -> list[Path]:
        """Return all post sources, sorted by path."""
        if not self.content_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.content_dir.rglob(f"*{self.source_ext}")
            if path.is_file() and self.is_source(path)
        )


def load_model(
    content_dir: Path,
    reader: str = "org",
    source_ext: str = ".org",
    static_dirs: Sequence[str] = ("assets", "images"),
) -> Model:
    """Parse every post source into a new Model.

    Sources that fail to parse are logged and left out.

    Args:
        content_dir: Directory containing site content.
        reader: Reader name passed to the document pipeline.
        source_ext: Extension of post sources.
        static_dirs: Top-level directories holding static files.

    Returns:
        Model containing one document per parsed source.
    """
    loader = SourceLoader(content_dir, source_ext, static_dirs)
    posts = {}
    for path in loader.iter_files():
        try:
            posts[loader.post_id(path)] = parse_file(path, reader)
        except ParseError as exc:
            logger.warning("Skipping %s: %s", path, exc.message)
    logger.info("Loaded %d posts from %s", len(posts), content_dir)
    return Model(posts)


def refresh(
    store: ModelStore, loader: SourceLoader, path: Path, reader: str = "org"
) -> Model:
    """Bring the store up to date with a single changed source file.

    An existing file is parsed and stored; a missing one is removed. Paths
    that are not post sources leave the store as is. A parse failure
    propagates and leaves the store unchanged.

    Args:
        store: Store holding the current model.
        loader: Loader describing the content layout.
        path: Source file that changed.
        reader: Reader name passed to the document pipeline.

    Returns:
        The model after the change.
    """
    if not loader.is_source(path):
        return store.snapshot()
    post_id = loader.post_id(path)
    if path.exists():
        doc = parse_file(path, reader)
        logger.debug("Updated %s", post_id)
        return store.upsert(post_id, doc)
    logger.debug("Removed %s", post_id)
    return store.remove(post_id)
