"""MongoDB document store implementation."""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pymongo.database import Database
from pymongo.errors import PyMongoError

from collection_sample.errors import ConnectivityError
from .base import BaseStore


logger = logging.getLogger(__name__)


class MongoStore(BaseStore):
    """Document store backed by an already-connected pymongo ``Database``.

    Features:
    - Lazy cursors that are closed when the consumer stops early
    - Raw BSON batch cursors for ``raw`` sampling
    - Driver errors re-raised as ``ConnectivityError``
    """

    def __init__(self, db: Database):
        """Wrap a database handle.

        Args:
            db: Connected pymongo database
        """
        self.db = db

    def server_version(self) -> str:
        """Read the server version from ``buildInfo``."""
        info = self.db.command("buildInfo")
        version = info.get("version")
        logger.debug(f"buildInfo reports MongoDB version {version}")
        return version

    def count_documents(
        self,
        collection: str,
        filter: Dict[str, Any],
        max_time_ms: Optional[int] = None
    ) -> int:
        kwargs = {}
        if max_time_ms is not None:
            kwargs["maxTimeMS"] = max_time_ms
        try:
            return self.db[collection].count_documents(filter, **kwargs)
        except PyMongoError as e:
            logger.error(f"Count on '{collection}' failed: {e}")
            raise ConnectivityError(f"Failed to count documents in '{collection}': {e}") from e

    def find(
        self,
        collection: str,
        filter: Dict[str, Any],
        projection: Optional[Dict[str, Any]] = None,
        sort: Optional[List[Tuple[str, Any]]] = None,
        limit: int = 0,
        max_time_ms: Optional[int] = None,
        raw: bool = False,
        batch_size: int = 0
    ) -> Iterator[Any]:
        coll = self.db[collection]
        kwargs = {"limit": limit, "batch_size": batch_size}
        if sort:
            kwargs["sort"] = list(sort)
        if max_time_ms is not None:
            kwargs["max_time_ms"] = max_time_ms
        method = coll.find_raw_batches if raw else coll.find

        try:
            with method(filter, projection, **kwargs) as cursor:
                yield from cursor
        except PyMongoError as e:
            logger.error(f"Find on '{collection}' failed: {e}")
            raise ConnectivityError(f"Failed to query '{collection}': {e}") from e

    def aggregate(
        self,
        collection: str,
        pipeline: List[Dict[str, Any]],
        allow_disk_use: bool = False,
        max_time_ms: Optional[int] = None,
        batch_size: int = 0,
        raw: bool = False
    ) -> Iterator[Any]:
        coll = self.db[collection]
        kwargs = {"allowDiskUse": allow_disk_use}
        if max_time_ms is not None:
            kwargs["maxTimeMS"] = max_time_ms
        if batch_size:
            kwargs["batchSize"] = batch_size
        method = coll.aggregate_raw_batches if raw else coll.aggregate

        try:
            with method(pipeline, **kwargs) as cursor:
                yield from cursor
        except PyMongoError as e:
            logger.error(f"Aggregation on '{collection}' failed: {e}")
            raise ConnectivityError(f"Failed to aggregate '{collection}': {e}") from e
