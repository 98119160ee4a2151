"""Reservoir sampling over a bounded id scan.

Used when the server has no ``$sample`` stage, or when ``$sample`` would
degrade into a blocking sort. Ids are sampled client-side with algorithm R
(https://en.wikipedia.org/wiki/Reservoir_sampling) and then resolved back
to documents with chunked ``$in`` lookups.
"""

import logging
import random
from contextlib import closing
from typing import Any, Iterable, Iterator, List, Optional

from collection_sample.schemas import SampleRequest
from collection_sample.stores.base import BaseStore
from collection_sample.utils.config import Config
from .base import BaseSampler


logger = logging.getLogger(__name__)


class Reservoir:
    """Fixed-capacity uniform sample of a stream of unknown length.

    After ``seen`` >= ``capacity`` items have been offered, every offered
    item is held with probability ``capacity / seen``.

    Example:
        >>> reservoir = Reservoir(3, rng=random.Random(7))
        >>> reservoir.extend(range(100))
        >>> len(reservoir), reservoir.seen
        (3, 100)
    """

    def __init__(self, capacity: int, rng: Optional[random.Random] = None):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.rng = rng or random.Random()
        self.seen = 0
        self._items: List[Any] = []

    def offer(self, item: Any) -> bool:
        """Offer one item. Returns True if it was kept."""
        self.seen += 1
        if len(self._items) < self.capacity:
            self._items.append(item)
            return True

        # Keep the k-th item with probability capacity/k, in a uniform slot.
        slot = self.rng.randrange(self.seen)
        if slot < self.capacity:
            self._items[slot] = item
            return True
        return False

    def extend(self, items: Iterable[Any]) -> None:
        for item in items:
            self.offer(item)

    @property
    def items(self) -> List[Any]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))


def reservoir_sample(
    items: Iterable[Any],
    size: int,
    rng: Optional[random.Random] = None
) -> List[Any]:
    """Return up to ``size`` items drawn uniformly from ``items`` in one pass."""
    reservoir = Reservoir(size, rng=rng)
    reservoir.extend(items)
    return reservoir.items


def chunked(items: List[Any], chunk_size: int) -> Iterator[List[Any]]:
    """Split ``items`` into consecutive lists of at most ``chunk_size``."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for i in range(0, len(items), chunk_size):
        yield items[i:i + chunk_size]


class ReservoirSampler(BaseSampler):
    """Sample documents with client-side reservoir sampling.

    Only the first ``scan_limit`` ids (in ``sort`` order) of the matching
    documents are candidates, which bounds the cost on huge collections at
    the price of never selecting documents past the limit.

    Example:
        >>> store = MongoStore(client["test"])
        >>> sampler = ReservoirSampler(store, "haystack", SampleRequest(size=10))
        >>> docs = list(sampler)
    """

    def __init__(
        self,
        store: BaseStore,
        collection_name: str,
        request: Optional[SampleRequest] = None,
        config: Optional[Config] = None,
        rng: Optional[random.Random] = None
    ):
        """Initialize reservoir sampler.

        Args:
            store: Store to sample from
            collection_name: Name of the collection
            request: Sample options
            config: Threshold configuration
            rng: Random generator, for reproducible samples
        """
        super().__init__(store, collection_name, request, config)
        self.rng = rng or random.Random()
        self.scan_limit = self.config.sampling.scan_limit

    def sample_ids(self) -> List[Any]:
        """Scan candidate ids and return the reservoir contents."""
        request = self.request
        logger.debug(f"Scanning ids of '{self.collection_name}' with filter {request.filter}")

        reservoir = Reservoir(request.size, rng=self.rng)
        scan = self.store.find(
            self.collection_name,
            request.filter,
            projection={"_id": 1},
            sort=request.sort,
            limit=self.scan_limit,
            max_time_ms=request.max_time_ms,
        )
        try:
            for record in scan:
                reservoir.offer(record["_id"])
        finally:
            close = getattr(scan, "close", None)
            if close is not None:
                close()

        if reservoir.seen >= self.scan_limit:
            logger.info(
                f"Id scan of '{self.collection_name}' stopped at the "
                f"{self.scan_limit} document limit"
            )
        logger.info(
            f"Reservoir sampled {len(reservoir)} of {reservoir.seen} ids "
            f"from '{self.collection_name}'"
        )
        return reservoir.items

    def iter_documents(self) -> Iterator[Any]:
        request = self.request
        ids = self.sample_ids()

        for chunk_num, chunk in enumerate(chunked(ids, request.chunk_size), 1):
            logger.debug(f"Chunk {chunk_num}: looking up {len(chunk)} documents")
            source = self.store.find(
                self.collection_name,
                {"_id": {"$in": chunk}},
                projection=request.projection,
                max_time_ms=request.max_time_ms,
                raw=request.raw,
                batch_size=len(chunk),
            )

            found = 0
            with closing(self._decode(source)) as docs:
                for doc in docs:
                    found += 1
                    yield doc

            if found < len(chunk):
                logger.warning(
                    f"Chunk {chunk_num}: {len(chunk) - found} of {len(chunk)} "
                    f"sampled documents no longer exist, dropping them"
                )
