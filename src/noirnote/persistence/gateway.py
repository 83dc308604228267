"""Cache-first document access with an ordered offline write queue."""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from noirnote.domain.errors import StoreUnavailable
from noirnote.persistence.keys import DocKey
from noirnote.persistence.store import Document, DocumentStore, apply_query, merge_document

logger = logging.getLogger(__name__)


class _CacheMiss:
    def __repr__(self) -> str:
        return "CACHE_MISS"

    def __bool__(self) -> bool:
        return False


CACHE_MISS = _CacheMiss()


@dataclass(frozen=True)
class PendingWrite:
    seq: int
    key: DocKey
    data: Document | None
    merge: bool = True

    @property
    def is_delete(self) -> bool:
        return self.data is None


@dataclass(frozen=True)
class WriteAck:
    seq: int
    delivered: bool


class PersistenceGateway:
    """Front door to the document store.

    Every write lands in the local cache first and is then queued; the queue
    is delivered strictly in order and stops at the first connectivity
    failure, leaving the rest for the next `flush()`. Reads fall back to the
    cache when the store cannot be reached, and a key the cache has never
    seen reads as `CACHE_MISS`, not as absent. Guard reads pass
    `strict=True` and get `StoreUnavailable` instead of a cached answer.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._cache: dict[DocKey, Document | None] = {}
        self._outbox: deque[PendingWrite] = deque()
        self._seq = 0

    @property
    def pending(self) -> int:
        return len(self._outbox)

    def pending_writes(self) -> list[PendingWrite]:
        return list(self._outbox)

    def get(self, key: DocKey, strict: bool = False) -> Document | None | _CacheMiss:
        self.flush()
        if self._has_pending(key):
            # Our queued write is newer than anything the store holds.
            return self._cached_or_none(key)
        try:
            doc = self.store.get(key)
        except StoreUnavailable as exc:
            if strict:
                raise
            logger.warning("[gateway] Store unreachable reading %s, using cache: %s", key.path, exc)
            return self.get_from_cache(key)
        self._cache[key] = copy.deepcopy(doc)
        return doc

    def get_from_cache(self, key: DocKey) -> Document | None | _CacheMiss:
        if key not in self._cache:
            return CACHE_MISS
        return copy.deepcopy(self._cache[key])

    def set(self, key: DocKey, data: Document, merge: bool = True) -> WriteAck:
        if merge:
            self._cache[key] = merge_document(self._cache.get(key), data)
        else:
            self._cache[key] = copy.deepcopy(data)
        return self._enqueue(key, copy.deepcopy(data), merge)

    def delete(self, key: DocKey) -> WriteAck:
        self._cache[key] = None
        return self._enqueue(key, None, False)

    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        strict: bool = False,
    ) -> list[Document]:
        """Query the store, or the cache while it is unreachable.

        The cache only holds what this process has read or written, so a
        cached answer may be partial; `strict=True` raises `StoreUnavailable`
        rather than returning one.
        """
        self.flush()
        if self.pending:
            if strict:
                raise StoreUnavailable(f"{self.pending} write(s) still queued, cannot read {collection}")
            return self._query_cache(collection, where, order_by, descending, limit)
        try:
            rows = self.store.query(collection, where, order_by, descending, limit)
        except StoreUnavailable as exc:
            if strict:
                raise
            logger.warning("[gateway] Store unreachable querying %s, using cache: %s", collection, exc)
            return self._query_cache(collection, where, order_by, descending, limit)
        for doc_id, doc in rows:
            self._cache[DocKey(collection, doc_id)] = copy.deepcopy(doc)
        return [doc for _, doc in rows]

    def flush(self) -> int:
        """Deliver queued writes in order. Returns how many were delivered."""
        delivered = 0
        while self._outbox:
            write = self._outbox[0]
            try:
                if write.is_delete:
                    self.store.delete(write.key)
                else:
                    self.store.set(write.key, write.data, merge=write.merge)
            except StoreUnavailable as exc:
                logger.info(
                    "[gateway] Store unreachable, %d write(s) queued for later: %s",
                    len(self._outbox),
                    exc,
                )
                break
            self._outbox.popleft()
            delivered += 1
        if delivered:
            logger.debug("[gateway] Delivered %d queued write(s)", delivered)
        return delivered

    def discard_pending(self) -> int:
        dropped = len(self._outbox)
        for write in self._outbox:
            self._cache.pop(write.key, None)
        self._outbox.clear()
        if dropped:
            logger.warning("[gateway] Discarded %d undelivered write(s)", dropped)
        return dropped

    def _enqueue(self, key: DocKey, data: Document | None, merge: bool) -> WriteAck:
        self._seq += 1
        seq = self._seq
        self._outbox.append(PendingWrite(seq=seq, key=key, data=data, merge=merge))
        self.flush()
        delivered = all(write.seq != seq for write in self._outbox)
        return WriteAck(seq=seq, delivered=delivered)

    def _has_pending(self, key: DocKey) -> bool:
        return any(write.key == key for write in self._outbox)

    def _cached_or_none(self, key: DocKey) -> Document | None:
        cached = self.get_from_cache(key)
        if cached is CACHE_MISS:
            return None
        return cached

    def _query_cache(
        self,
        collection: str,
        where: dict[str, Any] | None,
        order_by: str | None,
        descending: bool,
        limit: int | None,
    ) -> list[Document]:
        rows = [
            (key.doc_id, doc)
            for key, doc in self._cache.items()
            if key.collection == collection and doc is not None
        ]
        return [doc for _, doc in apply_query(rows, where, order_by, descending, limit)]
