"""Document storage, local cache, and the ordered write queue."""

from .db import SqliteDocumentStore
from .gateway import CACHE_MISS, PendingWrite, PersistenceGateway, WriteAck
from .keys import GLOBAL_SCOPE, DocKey
from .store import DocumentStore, MemoryDocumentStore

__all__ = [
    "CACHE_MISS",
    "DocKey",
    "DocumentStore",
    "GLOBAL_SCOPE",
    "MemoryDocumentStore",
    "PendingWrite",
    "PersistenceGateway",
    "SqliteDocumentStore",
    "WriteAck",
]
