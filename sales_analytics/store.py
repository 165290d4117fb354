"""
Document store handle for the sales collection.

``SalesStore`` wraps a pymongo collection and is passed explicitly to every
component that reads or writes sales documents. It adds no retries and no
error translation: pymongo exceptions reach the caller unchanged.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import structlog
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection

from .config import SalesSettings

logger = structlog.get_logger(__name__)

SortSpec = Sequence[Tuple[str, int]]


class SalesStore:
    """Explicit handle on the sales collection."""

    def __init__(self, collection: Collection, client: Optional[MongoClient] = None):
        self.collection = collection
        self.client = client

    @classmethod
    def connect(cls, settings: SalesSettings) -> "SalesStore":
        """Open a client from settings and bind the configured collection."""
        client = MongoClient(settings.mongo_url)
        collection = client[settings.database_name][settings.collection_name]
        logger.info(
            "Connected to document store",
            database=settings.database_name,
            collection=settings.collection_name,
        )
        return cls(collection, client=client)

    @property
    def name(self) -> str:
        return self.collection.name

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return self.collection.count_documents(query or {})

    def insert_many(self, documents: Iterable[Dict[str, Any]]) -> int:
        """Bulk insert documents, returning the number inserted."""
        documents = list(documents)
        if not documents:
            return 0
        result = self.collection.insert_many(documents)
        logger.debug("Inserted documents", count=len(result.inserted_ids))
        return len(result.inserted_ids)

    def find(
        self,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        """Filtered find with optional projection, sort and limit."""
        cursor = self.collection.find(query or {}, projection)
        if sort:
            cursor = cursor.sort(list(sort))
        if limit:
            cursor = cursor.limit(limit)
        documents = list(cursor)
        logger.debug("Find completed", query=query, returned=len(documents))
        return documents

    def update_many(self, query: Dict[str, Any], update: Dict[str, Any]) -> int:
        """Apply an operator update to every matching document.

        Returns the number of modified documents.
        """
        result = self.collection.update_many(query, update)
        logger.debug(
            "Bulk update completed",
            query=query,
            matched=result.matched_count,
            modified=result.modified_count,
        )
        return result.modified_count

    def update_one(self, query: Dict[str, Any], update: Dict[str, Any]) -> int:
        result = self.collection.update_one(query, update)
        return result.modified_count

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline and materialise the results."""
        results = list(self.collection.aggregate(pipeline))
        logger.debug("Aggregation completed", stages=len(pipeline), returned=len(results))
        return results

    def create_index(self, fields: Sequence[str]) -> str:
        """Create an ascending compound index; existing indexes are left as is."""
        name = self.collection.create_index([(field, ASCENDING) for field in fields])
        logger.info("Index ensured", index=name)
        return name

    def index_information(self) -> Dict[str, Any]:
        return self.collection.index_information()

    def drop(self) -> None:
        self.collection.drop()
        logger.warning("Collection dropped", collection=self.name)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
