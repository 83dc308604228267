"""SQLite-backed document store."""

from __future__ import annotations

from pathlib import Path
from typing import Any
import json
import sqlite3

from noirnote.domain.errors import StoreUnavailable
from noirnote.persistence.keys import DocKey
from noirnote.persistence.store import Document, apply_query, merge_document


class SqliteDocumentStore:
    """JSON documents keyed by (collection, doc_id) in a single table.

    Upserts keep the existing rowid, so query ties resolve in first-insert order.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"cannot open {self.path}: {exc}") from exc
        self.conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        self.conn.close()

    def get(self, key: DocKey) -> Document | None:
        try:
            cur = self.conn.cursor()
            cur.execute(
                "SELECT body FROM documents WHERE collection = ? AND doc_id = ?",
                (key.collection, key.doc_id),
            )
            row = cur.fetchone()
        except sqlite3.OperationalError as exc:
            raise StoreUnavailable(str(exc)) from exc
        if row is None:
            return None
        return json.loads(row["body"])

    def set(self, key: DocKey, data: Document, merge: bool = True) -> None:
        body = merge_document(self.get(key), data) if merge else data
        try:
            cur = self.conn.cursor()
            cur.execute(
                """
                INSERT INTO documents (collection, doc_id, body)
                VALUES (?, ?, ?)
                ON CONFLICT(collection, doc_id) DO UPDATE SET
                    body = excluded.body
                """,
                (key.collection, key.doc_id, json.dumps(body)),
            )
            self.conn.commit()
        except sqlite3.OperationalError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def delete(self, key: DocKey) -> None:
        try:
            cur = self.conn.cursor()
            cur.execute(
                "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                (key.collection, key.doc_id),
            )
            self.conn.commit()
        except sqlite3.OperationalError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, Document]]:
        try:
            cur = self.conn.cursor()
            cur.execute(
                "SELECT doc_id, body FROM documents WHERE collection = ? ORDER BY rowid",
                (collection,),
            )
            rows = [(entry["doc_id"], json.loads(entry["body"])) for entry in cur.fetchall()]
        except sqlite3.OperationalError as exc:
            raise StoreUnavailable(str(exc)) from exc
        return apply_query(rows, where, order_by, descending, limit)

    def _ensure_schema(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                doc_id TEXT NOT NULL,
                body TEXT NOT NULL,
                PRIMARY KEY (collection, doc_id)
            )
            """
        )
        self.conn.commit()
