"""Shared, append-only tables: the link cache and the dead link set.

Both are created once per build by the caller and passed to every engine
that should share them. Entries are only ever added.
"""

import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from md_interlinker.interpreter import WikilinkMeta


class LinkCache:
    """Raw wikilink token -> interpreted WikilinkMeta. First writer wins."""

    def __init__(self) -> None:
        self._entries: dict[str, "WikilinkMeta"] = {}
        self._lock = threading.Lock()

    def get(self, link: str) -> "WikilinkMeta | None":
        with self._lock:
            return self._entries.get(link)

    def setdefault(self, link: str, meta: "WikilinkMeta") -> "WikilinkMeta":
        """Store meta unless link is already cached; return the stored record."""
        with self._lock:
            return self._entries.setdefault(link, meta)

    def __contains__(self, link: object) -> bool:
        with self._lock:
            return link in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DeadLinks:
    """Raw tokens of links that could not be resolved, in first-seen order."""

    def __init__(self) -> None:
        self._links: dict[str, None] = {}
        self._lock = threading.Lock()

    def add(self, link: str) -> bool:
        """Record link; returns True if it was not already recorded."""
        with self._lock:
            if link in self._links:
                return False
            self._links[link] = None
            return True

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._links)

    def __contains__(self, link: object) -> bool:
        with self._lock:
            return link in self._links

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())
