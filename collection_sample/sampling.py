"""Sampling entry points.

Example:
    >>> from pymongo import MongoClient
    >>> from collection_sample import sample
    >>>
    >>> db = MongoClient("mongodb://localhost:27017")["test"]
    >>> for doc in sample(db, "haystack", size=10, query={"is_even": 1}):
    ...     print(doc["_id"])
"""

import logging
import random
from collections.abc import Mapping
from typing import Any, Iterator, Optional, Union

from pymongo.database import Database

from collection_sample.capability import supports_native_sample
from collection_sample.errors import InvalidRequest
from collection_sample.samplers import BaseSampler, NativeSampler, ReservoirSampler
from collection_sample.schemas import SampleRequest
from collection_sample.stores import BaseStore, MongoStore
from collection_sample.utils.config import Config, get_config


logger = logging.getLogger(__name__)


def as_store(db: Union[Database, BaseStore]) -> BaseStore:
    """Wrap a pymongo database in a ``MongoStore``; stores pass through.

    Raises:
        TypeError: If ``db`` is neither a pymongo Database nor a BaseStore
    """
    if isinstance(db, BaseStore):
        return db
    if isinstance(db, Database):
        return MongoStore(db)
    raise TypeError(
        f"db must be a pymongo Database or a BaseStore, got {type(db).__name__}"
    )


def _prepare(
    collection_name: str,
    options: Optional[Mapping],
    config: Optional[Config],
    kwargs: dict
):
    if not collection_name or not isinstance(collection_name, str):
        raise InvalidRequest(f"collection_name must be a non-empty string, got {collection_name!r}")
    config = config or get_config()
    request = SampleRequest.from_options(options, config=config, **kwargs)
    return request, config


def select_sampler(
    store: BaseStore,
    collection_name: str,
    request: SampleRequest,
    config: Config,
    rng: Optional[random.Random] = None
) -> BaseSampler:
    """Probe the server and build the matching sampler."""
    supported = supports_native_sample(store, config.sampling.min_native_version)
    logger.info(f"Native $sample available: {supported}")

    if not supported:
        return ReservoirSampler(store, collection_name, request, config=config, rng=rng)
    return NativeSampler(store, collection_name, request, config=config, rng=rng)


def get_sampler(
    db: Union[Database, BaseStore],
    collection_name: str,
    options: Optional[Mapping] = None,
    config: Optional[Config] = None,
    rng: Optional[random.Random] = None,
    **kwargs
) -> BaseSampler:
    """Return the sampler best suited to the server behind ``db``.

    Unlike ``sample`` this probes the server immediately.

    Args:
        db: pymongo database or store
        collection_name: Collection to sample
        options: Sample options (see ``SampleRequest``)
        config: Threshold configuration, defaults to ``get_config()``,
            which on first use loads the nearest ``.env`` file from the
            working directory into ``os.environ``
        rng: Random generator for reservoir sampling
        **kwargs: Sample options, override ``options``

    Returns:
        ``NativeSampler`` if the server supports ``$sample``, else
        ``ReservoirSampler``

    Raises:
        InvalidRequest: If the options are malformed
    """
    request, config = _prepare(collection_name, options, config, kwargs)
    return select_sampler(as_store(db), collection_name, request, config, rng)


def sample(
    db: Union[Database, BaseStore],
    collection_name: str,
    options: Optional[Mapping] = None,
    config: Optional[Config] = None,
    rng: Optional[random.Random] = None,
    **kwargs
) -> Iterator[Any]:
    """Lazily sample documents from a collection.

    Options are validated right away; the server is not contacted until the
    returned iterator is first advanced. Store failures are raised from the
    iterator. Closing the iterator early releases any open cursor.

    Args:
        db: pymongo database or store
        collection_name: Collection to sample
        options: Sample options: ``query``/``filter``, ``size``,
            ``fields``/``projection``, ``raw``, ``sort``, ``maxTimeMS``,
            ``promoteValues``, ``chunkSize``
        config: Threshold configuration, defaults to ``get_config()``,
            which on first use loads the nearest ``.env`` file from the
            working directory into ``os.environ``
        rng: Random generator for reservoir sampling
        **kwargs: Sample options, override ``options``

    Returns:
        Iterator of documents, or of BSON ``bytes`` when ``raw`` is set

    Raises:
        InvalidRequest: If the options are malformed
        TypeError: If ``db`` is not a database or store
    """
    request, config = _prepare(collection_name, options, config, kwargs)
    store = as_store(db)
    return _stream(store, collection_name, request, config, rng)


def _stream(
    store: BaseStore,
    collection_name: str,
    request: SampleRequest,
    config: Config,
    rng: Optional[random.Random]
) -> Iterator[Any]:
    sampler = select_sampler(store, collection_name, request, config, rng)
    yield from sampler.iter_documents()
