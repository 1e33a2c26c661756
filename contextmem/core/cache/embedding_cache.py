"""
Bounded LRU cache of processed document chunks.

Keyed by ``page_{page}_chunk_{index}``, prefixed with a document id when the
caller supplies one. Without a document id, chunks at the same position in
different documents share a key. The lock is a leaf lock: it is only
held for dictionary operations, never across an ``await``.
"""

import threading
from collections import OrderedDict

from contextmem.models.document import ProcessedChunk
from contextmem.utils.id_generator import generate_chunk_key
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingCache:
    """
    Fixed-capacity cache of ``ProcessedChunk`` entries.

    ``get`` returns None on a miss and marks the entry most recently used on a
    hit. ``put`` evicts exactly one least recently used entry when a new key
    would exceed capacity.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, ProcessedChunk] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def key_for(page_number: int, chunk_index: int, document_id: str | None = None) -> str:
        return generate_chunk_key(page_number, chunk_index, document_id)

    def get(self, key: str) -> ProcessedChunk | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(self, key: str, entry: ProcessedChunk) -> None:
        """Insert or replace an entry (last writer wins)."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = entry
            if len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cached chunk {evicted}")

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
