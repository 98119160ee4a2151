"""Exceptions raised while sampling a collection."""


class SamplingError(RuntimeError):
    """Base class for failures that happen while a sample is being drawn."""


class ConnectivityError(SamplingError):
    """The store could not be reached or a count/find/aggregate call failed."""


class CapabilityProbeFailure(SamplingError):
    """The server version could not be read or parsed."""


class InvalidRequest(ValueError):
    """The sample options are malformed. Raised before any store I/O."""
