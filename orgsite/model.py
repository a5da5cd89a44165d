"""In-memory content model for orgsite.

The model maps post ids (paths relative to the content root, such as
"posts/hello.org") to parsed documents. Updates never modify a model in
place: ``insert`` and ``delete`` return a new Model, so any snapshot a reader
holds stays consistent while the site is rebuilt.

Key classes:
- Model: Immutable mapping of post id to document.
- ModelStore: Holds the current Model and serializes writers.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .pandoc import Doc


@dataclass(frozen=True)
class Model:
    """Immutable site model.

    Attributes:
        posts: Read-only mapping of post id to parsed document.
    """

    posts: Mapping[str, Doc] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # posts is always a read-only private copy.
        object.__setattr__(self, "posts", MappingProxyType(dict(self.posts)))

    @classmethod
    def empty(cls) -> Model:
        """Return a model with no posts."""
        return cls()

    def lookup(self, post_id: str) -> Doc | None:
        """Return the document for ``post_id``, or None if absent."""
        return self.posts.get(post_id)

    def insert(self, post_id: str, doc: Doc) -> Model:
        """Return a model with ``post_id`` mapped to ``doc``.

        Any previous document for the id is replaced.
        """
        posts = dict(self.posts)
        posts[post_id] = doc
        return Model(posts)

    def delete(self, post_id: str) -> Model:
        """Return a model without ``post_id``; absent ids are a no-op."""
        if post_id not in self.posts:
            return self
        posts = {k: v for k, v in self.posts.items() if k != post_id}
        return Model(posts)

    def keys(self) -> list[str]:
        """Return all post ids in ascending order."""
        return sorted(self.posts)

    def __contains__(self, post_id: object) -> bool:
        return post_id in self.posts

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.posts)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Model({len(self.posts)} posts)"


class ModelStore:
    """Holds the current Model for a running site.

    Writers go through ``update`` one at a time. Readers call ``snapshot`` and
    keep working with that value while later updates replace it.
    """

    def __init__(self, model: Model | None = None):
        self._model = model or Model.empty()
        self._lock = threading.Lock()

    def snapshot(self) -> Model:
        return self._model

    def update(self, change: Callable[[Model], Model]) -> Model:
        """Apply ``change`` to the current model and store the result.

        Args:
            change: Function producing the next model from the current one.

        Returns:
            The new current model.
        """
        with self._lock:
            self._model = change(self._model)
            return self._model

    def upsert(self, post_id: str, doc: Doc) -> Model:
        return self.update(lambda model: model.insert(post_id, doc))

    def remove(self, post_id: str) -> Model:
        return self.update(lambda model: model.delete(post_id))
