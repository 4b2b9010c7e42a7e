"""Per-user document store with atomic batches and change notifications"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pocket_ledger.domain.exceptions import DocumentNotFound, PersistenceError
from pocket_ledger.infrastructure.database.models import Document, new_document_id
from pocket_ledger.infrastructure.observability.metrics import persistence_failure_counter

CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"


@dataclass
class StoredDocument:
    """Raw record as read from the store"""

    id: str
    data: Dict[str, Any]
    created_at: Optional[datetime] = None


@dataclass
class Delta:
    """One committed change to a collection"""

    kind: str  # created | updated | deleted
    collection: str
    doc_id: str
    data: Optional[Dict[str, Any]] = field(default=None)


Listener = Callable[[Delta], None]


class Subscription:
    """Handle returned by subscribe(); cancel() stops delivery"""

    def __init__(self, feed: "ChangeFeed", key: Tuple[str, str], callback: Listener):
        self._feed = feed
        self._key = key
        self._callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._feed._remove(self._key, self._callback)
            self.active = False


class ChangeFeed:
    """Listener registry keyed by (user_id, collection)"""

    def __init__(self):
        self._listeners: Dict[Tuple[str, str], List[Listener]] = defaultdict(list)
        # Shared across request threads
        self._lock = threading.Lock()

    def subscribe(self, user_id: str, collection: str, callback: Listener) -> Subscription:
        key = (user_id, collection)
        with self._lock:
            self._listeners[key].append(callback)
        return Subscription(self, key, callback)

    def publish(self, user_id: str, delta: Delta) -> None:
        with self._lock:
            callbacks = list(self._listeners.get((user_id, delta.collection), []))
        for callback in callbacks:
            try:
                callback(delta)
            except Exception:
                # A broken listener must not undo a committed write
                logging.exception(
                    "Change listener failed",
                    extra={"user_id": user_id, "collection": delta.collection, "doc_id": delta.doc_id},
                )

    def _remove(self, key: Tuple[str, str], callback: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(key, [])
            if callback in listeners:
                listeners.remove(callback)
            if not listeners:
                self._listeners.pop(key, None)

    def listener_count(self, user_id: str, collection: str) -> int:
        with self._lock:
            return len(self._listeners.get((user_id, collection), []))


def _sort_key(value: Any) -> tuple:
    return (value is None, value if value is not None else "")


class DocumentStore:
    """
    Schemaless key-value documents scoped to one user.

    Writes outside batch() commit immediately. Inside batch() they commit
    together when the block exits, or roll back together if it raises.
    Change deltas are published only after the commit succeeds.

    Raises:
        PersistenceError: any database failure, after rollback
        DocumentNotFound: update/delete of a missing document
    """

    def __init__(self, db: Session, user_id: str, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.user_id = user_id
        self.feed = feed or ChangeFeed()
        self._batch_depth = 0
        self._pending: List[Delta] = []

    # Reads

    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[StoredDocument]:
        try:
            rows = (
                self.db.query(Document)
                .filter(Document.user_id == self.user_id, Document.collection == collection)
                .order_by(Document.id)
                .all()
            )
        except SQLAlchemyError as e:
            persistence_failure_counter.labels(operation="list").inc()
            raise PersistenceError(f"Could not read {collection}") from e

        docs = [StoredDocument(id=row.doc_id, data=dict(row.data or {}), created_at=row.created_at) for row in rows]
        if order_by:
            docs.sort(key=lambda doc: _sort_key(doc.data.get(order_by)), reverse=descending)
        return docs

    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        row = self._row(collection, doc_id)
        if row is None:
            return None
        return StoredDocument(id=row.doc_id, data=dict(row.data or {}), created_at=row.created_at)

    # Writes

    def create(self, collection: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or new_document_id()
        self.db.add(Document(user_id=self.user_id, collection=collection, doc_id=doc_id, data=dict(data)))
        self._written(Delta(CREATED, collection, doc_id, dict(data)), operation="create")
        return doc_id

    def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        row = self._row(collection, doc_id)
        if row is None:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")
        # Reassign so the JSON column is marked dirty
        row.data = {**(row.data or {}), **partial}
        self._written(Delta(UPDATED, collection, doc_id, dict(row.data)), operation="update")

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Replace an existing document's data wholesale; keys left out are dropped"""
        row = self._row(collection, doc_id)
        if row is None:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")
        row.data = dict(data)
        self._written(Delta(UPDATED, collection, doc_id, dict(row.data)), operation="set")

    def delete(self, collection: str, doc_id: str) -> None:
        row = self._row(collection, doc_id)
        if row is None:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")
        self.db.delete(row)
        self._written(Delta(DELETED, collection, doc_id), operation="delete")

    @contextmanager
    def batch(self) -> Iterator["DocumentStore"]:
        """Group writes into a single all-or-nothing commit"""
        self._batch_depth += 1
        try:
            yield self
        except Exception:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self.db.rollback()
                self._pending.clear()
            raise
        else:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._commit()

    # Notifications

    def subscribe(self, collection: str, callback: Listener) -> Subscription:
        return self.feed.subscribe(self.user_id, collection, callback)

    # Internals

    def _row(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            return (
                self.db.query(Document)
                .filter(
                    Document.user_id == self.user_id,
                    Document.collection == collection,
                    Document.doc_id == doc_id,
                )
                .first()
            )
        except SQLAlchemyError as e:
            persistence_failure_counter.labels(operation="get").inc()
            raise PersistenceError(f"Could not read {collection}/{doc_id}") from e

    def _written(self, delta: Delta, operation: str) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            persistence_failure_counter.labels(operation=operation).inc()
            if self._batch_depth == 0:
                self.db.rollback()
            raise PersistenceError(f"Could not {operation} {delta.collection}/{delta.doc_id}") from e

        self._pending.append(delta)
        if self._batch_depth == 0:
            self._commit()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            persistence_failure_counter.labels(operation="commit").inc()
            self.db.rollback()
            self._pending.clear()
            raise PersistenceError("Could not commit changes") from e

        deltas, self._pending = self._pending, []
        for delta in deltas:
            self.feed.publish(self.user_id, delta)
