"""Draw random samples of documents from MongoDB collections.

Uses the server's ``$sample`` stage when it is available and efficient,
and client-side reservoir sampling otherwise.
"""

from collection_sample.errors import (
    CapabilityProbeFailure,
    ConnectivityError,
    InvalidRequest,
    SamplingError,
)
from collection_sample.samplers import (
    BaseSampler,
    NativeSampler,
    Reservoir,
    ReservoirSampler,
    reservoir_sample,
)
from collection_sample.sampling import get_sampler, sample
from collection_sample.schemas import SampleRequest
from collection_sample.stores import BaseStore, MongoStore

__version__ = "0.1.0"

__all__ = [
    "sample",
    "get_sampler",
    "SampleRequest",
    "BaseSampler",
    "NativeSampler",
    "ReservoirSampler",
    "Reservoir",
    "reservoir_sample",
    "BaseStore",
    "MongoStore",
    "SamplingError",
    "ConnectivityError",
    "CapabilityProbeFailure",
    "InvalidRequest",
]
