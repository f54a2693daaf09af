"""In-Memory Document Store"""
import copy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import uuid4

from domain.exceptions import NotFoundError
from domain.repositories import DocumentStore, Filters
from infrastructure.logging_config import get_logger

logger = get_logger("document_store")


class InMemoryDocumentStore(DocumentStore):
    """Schema-less collections of dict documents.

    Documents are copied on the way in and out so callers never share state
    with the store. createdAt/updatedAt are stamped on write, last write wins.
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._last_timestamp = datetime.min

    def _server_timestamp(self) -> datetime:
        """Strictly increasing write time so createdAt ordering is total"""
        now = datetime.utcnow()
        if now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    @staticmethod
    def _with_id(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        document = copy.deepcopy(data)
        document["id"] = doc_id
        return document

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document"""
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return self._with_id(doc_id, data)

    async def query(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        """Equality-filtered, optionally ordered scan of a collection"""
        results = [
            self._with_id(doc_id, data)
            for doc_id, data in self._collection(collection).items()
            if all(data.get(field) == value for field, value in filters or [])
        ]
        if order_by:
            # Documents missing the field sort first ascending, last descending
            results.sort(
                key=lambda d: (d.get(order_by) is not None, d.get(order_by) or 0),
                reverse=descending
            )
        return results

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document under a generated id"""
        doc_id = uuid4().hex[:20]
        now = self._server_timestamp()
        document = copy.deepcopy(data)
        document.pop("id", None)
        document["createdAt"] = now
        document["updatedAt"] = now
        self._collection(collection)[doc_id] = document
        logger.debug("Added %s/%s", collection, doc_id)
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge fields into an existing document"""
        documents = self._collection(collection)
        if doc_id not in documents:
            raise NotFoundError(collection, doc_id)
        changes = copy.deepcopy(data)
        changes.pop("id", None)
        changes.pop("createdAt", None)
        changes["updatedAt"] = self._server_timestamp()
        documents[doc_id].update(changes)
        logger.debug("Updated %s/%s fields=%s", collection, doc_id, sorted(changes))

    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document; deleting a missing id is a no-op"""
        self._collection(collection).pop(doc_id, None)
        logger.debug("Deleted %s/%s", collection, doc_id)
