"""Base class for collection samplers."""

from abc import ABC, abstractmethod
from typing import Any, Iterator, Optional

from collection_sample.codec import promote_values, split_raw_batches
from collection_sample.schemas import SampleRequest
from collection_sample.stores.base import BaseStore
from collection_sample.utils.config import Config, get_config


class BaseSampler(ABC):
    """Abstract base class for sampling strategies.

    A sampler is a reusable, lazy description of one sampling operation:
    nothing touches the store until it is iterated. Each iteration draws a
    fresh sample. Closing the iterator early closes any open cursor.

    Attributes:
        store: Store the documents come from
        collection_name: Collection to sample
        request: Validated sample options
        config: Threshold configuration
    """

    def __init__(
        self,
        store: BaseStore,
        collection_name: str,
        request: Optional[SampleRequest] = None,
        config: Optional[Config] = None
    ):
        """Initialize sampler.

        Args:
            store: Store to sample from
            collection_name: Name of the collection
            request: Sample options (defaults apply when omitted)
            config: Threshold configuration, defaults to ``get_config()``

        Raises:
            ValueError: If collection_name is empty
        """
        if not collection_name:
            raise ValueError("collection_name cannot be empty")

        self.store = store
        self.collection_name = collection_name
        self.config = config or get_config()
        self.request = request or SampleRequest.from_options(config=self.config)
        self.name = self.__class__.__name__

    def __iter__(self) -> Iterator[Any]:
        return self.iter_documents()

    @abstractmethod
    def iter_documents(self) -> Iterator[Any]:
        """Lazily yield the sampled documents (or raw BSON buffers)."""
        pass

    # Shorthands for request fields used by every strategy.

    @property
    def size(self) -> int:
        return self.request.size

    @property
    def sort(self):
        return self.request.sort

    def _decode(self, source: Iterator[Any]) -> Iterator[Any]:
        """Turn a store iterator into one emitted unit per document.

        The source is closed when this generator finishes or is closed.
        """
        try:
            if self.request.raw:
                yield from split_raw_batches(source)
            elif self.request.promote_values:
                for doc in source:
                    yield promote_values(doc)
            else:
                yield from source
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                close()
