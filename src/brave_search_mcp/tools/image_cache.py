"""In-memory registry of downloaded images, exposed as MCP resources."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class CachedImage:
    title: str
    data: bytes
    mime_type: str = "image/png"


class ImageRegistry:
    """Bounded title -> image store with least-recently-used eviction.

    ``put`` and ``get`` both refresh recency. All access goes through one
    lock, so concurrent tool calls and resource reads can share an instance.
    """

    def __init__(self, max_entries: int = 50):
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self._images: "OrderedDict[str, CachedImage]" = OrderedDict()
        self._lock = threading.Lock()

    def put(self, title: str, data: bytes, mime_type: str = "image/png") -> CachedImage:
        image = CachedImage(title=title, data=data, mime_type=mime_type)
        with self._lock:
            self._images[title] = image
            self._images.move_to_end(title)
            while len(self._images) > self.max_entries:
                self._images.popitem(last=False)
        return image

    def get(self, title: str) -> Optional[CachedImage]:
        with self._lock:
            image = self._images.get(title)
            if image is not None:
                self._images.move_to_end(title)
            return image

    def titles(self) -> List[str]:
        with self._lock:
            return list(self._images)

    def entries(self) -> List[CachedImage]:
        """Snapshot of every cached image, oldest first; recency is left unchanged."""
        with self._lock:
            return list(self._images.values())

    def clear(self) -> None:
        with self._lock:
            self._images.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)

    def __contains__(self, title: object) -> bool:
        with self._lock:
            return title in self._images
