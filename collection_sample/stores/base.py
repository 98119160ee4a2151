"""Base class for document stores."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple


class BaseStore(ABC):
    """Abstract base class for document storage backends.

    Samplers only talk to the store through these methods, so any backend
    able to count, scan and aggregate a collection can be sampled. Iterators
    returned by ``find`` and ``aggregate`` must be lazy and must release
    their server-side cursor when closed early.
    """

    @abstractmethod
    def server_version(self) -> str:
        """Return the server version string (e.g. ``"4.4.1"``).

        Raises:
            Exception: Any failure; callers treat it as "version unknown"
        """
        pass

    @abstractmethod
    def count_documents(
        self,
        collection: str,
        filter: Dict[str, Any],
        max_time_ms: Optional[int] = None
    ) -> int:
        """Count documents matching ``filter``.

        Args:
            collection: Collection name
            filter: Query predicate, passed to the server as-is
            max_time_ms: Server-side time limit for the count

        Returns:
            Number of matching documents

        Raises:
            ConnectivityError: If the count fails
        """
        pass

    @abstractmethod
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
        """Lazily iterate documents matching ``filter``.

        Args:
            collection: Collection name
            filter: Query predicate
            projection: Field selection, or None for whole documents
            sort: Ordering as ``(field, direction)`` pairs
            limit: Maximum number of documents, 0 for no limit
            max_time_ms: Server-side time limit
            raw: Yield raw BSON batches instead of decoded documents
            batch_size: Documents per server round trip, 0 for driver default

        Returns:
            Iterator of documents, or of ``bytes`` batches when ``raw``

        Raises:
            ConnectivityError: If the query fails (raised while iterating)
        """
        pass

    @abstractmethod
    def aggregate(
        self,
        collection: str,
        pipeline: List[Dict[str, Any]],
        allow_disk_use: bool = False,
        max_time_ms: Optional[int] = None,
        batch_size: int = 0,
        raw: bool = False
    ) -> Iterator[Any]:
        """Lazily run an aggregation pipeline.

        Args:
            collection: Collection name
            pipeline: Aggregation stages
            allow_disk_use: Let blocking stages spill to disk
            max_time_ms: Server-side time limit
            batch_size: Documents per server round trip, 0 for driver default
            raw: Yield raw BSON batches instead of decoded documents

        Returns:
            Iterator of documents, or of ``bytes`` batches when ``raw``

        Raises:
            ConnectivityError: If the aggregation fails (raised while iterating)
        """
        pass
