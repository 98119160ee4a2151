"""Samplers for MongoDB collections.

Two strategies share one interface: iterate a sampler to get the sampled
documents.
"""

from .base import BaseSampler
from .native import NativeSampler
from .reservoir import Reservoir, ReservoirSampler, reservoir_sample

__all__ = [
    "BaseSampler",
    "NativeSampler",
    "Reservoir",
    "ReservoirSampler",
    "reservoir_sample",
]
