"""
Document database abstraction over Firestore, plus an in-memory implementation
for local development and tests.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from google.api_core import exceptions
from google.cloud.firestore_v1 import DELETE_FIELD, SERVER_TIMESTAMP, Increment, Query
from google.cloud.firestore_v1.base_query import FieldFilter

from shared.constants import MAX_BATCH_WRITES


class DocumentNotFoundError(Exception):
    """Raised when an update targets a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


class WriteOp(Enum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class Write:
    """A single operation inside an atomic batch."""

    op: WriteOp
    collection: str
    doc_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    merge: bool = False


def set_doc(collection: str, doc_id: str, data: dict, merge: bool = False) -> Write:
    return Write(WriteOp.SET, collection, doc_id, data, merge)


def update_doc(collection: str, doc_id: str, data: dict) -> Write:
    return Write(WriteOp.UPDATE, collection, doc_id, data)


def delete_doc(collection: str, doc_id: str) -> Write:
    return Write(WriteOp.DELETE, collection, doc_id)


# Filters are `(field, value)` for equality or `(field, op, value)` with op
# "==" or "in".
FILTER_OPS = ("==", "in")


def _filter_parts(query_filter: tuple) -> tuple[str, str, Any]:
    if len(query_filter) == 2:
        field_path, value = query_filter
        return field_path, "==", value
    field_path, op, value = query_filter
    if op not in FILTER_OPS:
        raise ValueError(f"Unsupported filter operator: {op}")
    return field_path, op, value


def _matches(doc: dict, query_filter: tuple) -> bool:
    field_path, op, value = _filter_parts(query_filter)
    if field_path not in doc:
        return False
    if op == "in":
        return doc[field_path] in value
    return doc[field_path] == value


class DbClient(Protocol):
    """Interface for document access."""

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def query(
        self,
        collection: str,
        filters: Sequence[tuple] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[tuple[str, dict]]:
        ...

    def new_id(self, collection: str) -> str:
        ...

    def commit(self, writes: Sequence[Write]) -> None:
        ...


class InMemoryDbClient:
    """
    Simple in-memory document store for development and tests.

    Batches are applied all-or-nothing, updates of missing documents fail like
    they do in Firestore, and SERVER_TIMESTAMP / Increment / DELETE_FIELD
    values are resolved on write.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self.commit_count = 0
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()
        self.commit_count = 0

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self.collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def query(
        self,
        collection: str,
        filters: Sequence[tuple] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[tuple[str, dict]]:
        items = [
            (doc_id, doc)
            for doc_id, doc in self.collections.get(collection, {}).items()
            if all(_matches(doc, query_filter) for query_filter in filters)
        ]
        if order_by:
            # Firestore leaves out documents that lack the ordering field.
            items = [item for item in items if order_by in item[1]]
            items.sort(
                key=lambda item: (item[1][order_by] is not None, item[1][order_by]),
                reverse=descending,
            )
        items = items[offset:]
        if limit is not None:
            items = items[:limit]
        return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in items]

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex[:20]

    def commit(self, writes: Sequence[Write]) -> None:
        if len(writes) > MAX_BATCH_WRITES:
            raise ValueError(f"Batch exceeds {MAX_BATCH_WRITES} writes")
        staged = {name: dict(docs) for name, docs in self.collections.items()}
        for write in writes:
            docs = staged.setdefault(write.collection, {})
            if write.op == WriteOp.SET:
                base = dict(docs.get(write.doc_id, {})) if write.merge else {}
                docs[write.doc_id] = self._apply(base, write.data)
            elif write.op == WriteOp.UPDATE:
                if write.doc_id not in docs:
                    raise DocumentNotFoundError(write.collection, write.doc_id)
                docs[write.doc_id] = self._apply(
                    dict(docs[write.doc_id]), write.data
                )
            else:
                docs.pop(write.doc_id, None)
        self.collections = staged
        self.commit_count += 1

    def _apply(self, doc: dict, data: dict) -> dict:
        now = self._clock()
        for key, value in data.items():
            if value is DELETE_FIELD:
                doc.pop(key, None)
            elif value is SERVER_TIMESTAMP:
                doc[key] = now
            elif isinstance(value, Increment):
                current = doc.get(key)
                base = current if isinstance(current, (int, float)) else 0
                doc[key] = base + value.value
            else:
                doc[key] = copy.deepcopy(value)
        return doc


class FirestoreDbClient:
    """Firestore-backed implementation using the Admin SDK client."""

    def __init__(self, client):
        self._client = client

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self._client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def query(
        self,
        collection: str,
        filters: Sequence[tuple] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[tuple[str, dict]]:
        query = self._client.collection(collection)
        for query_filter in filters:
            query = query.where(filter=FieldFilter(*_filter_parts(query_filter)))
        if order_by:
            query = query.order_by(
                order_by,
                direction=Query.DESCENDING if descending else Query.ASCENDING,
            )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    def new_id(self, collection: str) -> str:
        return self._client.collection(collection).document().id

    def commit(self, writes: Sequence[Write]) -> None:
        if len(writes) > MAX_BATCH_WRITES:
            raise ValueError(f"Batch exceeds {MAX_BATCH_WRITES} writes")
        batch = self._client.batch()
        for write in writes:
            doc_ref = self._client.collection(write.collection).document(
                write.doc_id
            )
            if write.op == WriteOp.SET:
                batch.set(doc_ref, write.data, merge=write.merge)
            elif write.op == WriteOp.UPDATE:
                batch.update(doc_ref, write.data)
            else:
                batch.delete(doc_ref)
        try:
            batch.commit()
        except exceptions.NotFound as e:
            # Firestore does not say which update failed.
            raise DocumentNotFoundError("batch", str(e)) from e
