"""Document store contract and an in-memory implementation."""

from __future__ import annotations

import copy
from typing import Any, Iterable, Protocol

from noirnote.domain.errors import StoreUnavailable
from noirnote.persistence.keys import DocKey

Document = dict[str, Any]


class DocumentStore(Protocol):
    def get(self, key: DocKey) -> Document | None: ...

    def set(self, key: DocKey, data: Document, merge: bool = True) -> None: ...

    def delete(self, key: DocKey) -> None: ...

    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, Document]]: ...


def merge_document(base: Document | None, partial: Document) -> Document:
    merged = copy.deepcopy(base) if base else {}
    for field, value in partial.items():
        current = merged.get(field)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[field] = merge_document(current, value)
        else:
            merged[field] = copy.deepcopy(value)
    return merged


def apply_query(
    rows: Iterable[tuple[str, Document]],
    where: dict[str, Any] | None = None,
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = None,
) -> list[tuple[str, Document]]:
    """Filter by field equality, then stable-sort so ties keep insertion order."""
    conditions = where or {}
    matched = [
        (doc_id, doc)
        for doc_id, doc in rows
        if all(doc.get(field) == value for field, value in conditions.items())
    ]
    if order_by is not None:
        matched.sort(key=lambda row: row[1].get(order_by) or 0, reverse=descending)
    if limit is not None:
        matched = matched[:limit]
    return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in matched]


class MemoryDocumentStore:
    """Dict-backed store; flip `online` to simulate lost connectivity."""

    def __init__(self) -> None:
        self.online = True
        self.writes: list[DocKey] = []
        self._docs: dict[DocKey, Document] = {}

    def _require_online(self) -> None:
        if not self.online:
            raise StoreUnavailable("memory store is offline")

    def get(self, key: DocKey) -> Document | None:
        self._require_online()
        doc = self._docs.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, key: DocKey, data: Document, merge: bool = True) -> None:
        self._require_online()
        if merge:
            self._docs[key] = merge_document(self._docs.get(key), data)
        else:
            self._docs[key] = copy.deepcopy(data)
        self.writes.append(key)

    def delete(self, key: DocKey) -> None:
        self._require_online()
        self._docs.pop(key, None)
        self.writes.append(key)

    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, Document]]:
        self._require_online()
        rows = [(key.doc_id, doc) for key, doc in self._docs.items() if key.collection == collection]
        return apply_query(rows, where, order_by, descending, limit)
