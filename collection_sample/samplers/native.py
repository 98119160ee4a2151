"""Sampling with the server's ``$sample`` aggregation stage."""

import logging
import random
from typing import Any, Dict, Iterator, List, Optional

from collection_sample.schemas import SampleRequest
from collection_sample.stores.base import BaseStore
from collection_sample.utils.config import Config
from .base import BaseSampler
from .reservoir import ReservoirSampler


logger = logging.getLogger(__name__)


class NativeSampler(BaseSampler):
    """Sample documents with a ``[$match, $sample, $project]`` pipeline.

    ``$sample`` turns into a full blocking sort once the sample is more than
    about 5% of the input (SERVER-22815). Requests in that range, i.e.
    ``size < count <= native_ratio_cutoff * size``, are handed to a
    ``ReservoirSampler`` instead. When the whole population is requested no
    ``$sample`` stage is added at all.

    Each iteration is an independent operation with its own count and
    pipeline. The attributes below are diagnostics of the most recently
    started run only; overlapping iterations overwrite them, but never the
    pipeline an earlier iteration is executing.

    Attributes:
        pipeline: Stages of the last started run, None when that run
            deferred to reservoir sampling or no run has started yet
        count: Matching document count read by the last started run
    """

    def __init__(
        self,
        store: BaseStore,
        collection_name: str,
        request: Optional[SampleRequest] = None,
        config: Optional[Config] = None,
        rng: Optional[random.Random] = None
    ):
        """Initialize native sampler.

        Args:
            store: Store to sample from
            collection_name: Name of the collection
            request: Sample options
            config: Threshold configuration
            rng: Random generator passed on to the reservoir fallback
        """
        super().__init__(store, collection_name, request, config)
        self.rng = rng
        self.ratio_cutoff = self.config.sampling.native_ratio_cutoff
        self.pipeline: Optional[List[Dict[str, Any]]] = None
        self.count: Optional[int] = None

    def should_defer(self, count: int) -> bool:
        """Return True if ``count`` falls in the range ``$sample`` handles badly."""
        return self.size < count <= self.size * self.ratio_cutoff

    def build_pipeline(self, count: int) -> List[Dict[str, Any]]:
        """Build the aggregation pipeline for a population of ``count``.

        Args:
            count: Number of documents matching the filter

        Returns:
            Stages in the order ``$match``, ``$sample``, ``$project``; each
            stage only present when needed
        """
        request = self.request
        pipeline = []

        if request.has_filter:
            pipeline.append({"$match": request.filter})

        # With fewer matches than requested the whole population is the sample.
        if count > request.size:
            pipeline.append({"$sample": {"size": min(request.size, count)}})

        # Project last so only sampled documents are reshaped.
        if request.has_projection:
            pipeline.append({"$project": request.projection})

        return pipeline

    def iter_documents(self) -> Iterator[Any]:
        request = self.request

        count = self.store.count_documents(
            self.collection_name,
            request.filter,
            max_time_ms=request.max_time_ms,
        )
        self.count = count
        self.pipeline = None
        logger.info(
            f"Sampling {request.size} documents from '{self.collection_name}' "
            f"with {count} matching documents"
        )

        if self.should_defer(count):
            logger.info(
                f"Requested more than 1/{self.ratio_cutoff} of the matching documents, "
                f"using reservoir sampling to avoid a blocking $sample sort"
            )
            fallback = ReservoirSampler(
                self.store,
                self.collection_name,
                request,
                config=self.config,
                rng=self.rng,
            )
            yield from fallback.iter_documents()
            return

        pipeline = self.build_pipeline(count)
        self.pipeline = pipeline
        logger.debug(f"Running pipeline {pipeline}")

        source = self.store.aggregate(
            self.collection_name,
            pipeline,
            allow_disk_use=True,
            max_time_ms=request.max_time_ms,
            batch_size=request.size,
            raw=request.raw,
        )
        yield from self._decode(source)
