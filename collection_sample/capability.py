"""Server capability detection.

Decides whether the server can run the ``$sample`` aggregation stage. A
failed probe never aborts sampling: the reservoir sampler works against
every server version, so an unknown version is treated as unsupported.
"""

import logging
import re
from typing import Tuple

from collection_sample.errors import CapabilityProbeFailure
from collection_sample.stores.base import BaseStore


logger = logging.getLogger(__name__)

MIN_NATIVE_SAMPLE_VERSION = "3.1.6"

_VERSION_RE = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(version: str) -> Tuple[int, int, int]:
    """Parse ``"major.minor.patch[-suffix]"`` into a comparable tuple.

    Missing components count as 0 and any pre-release or build suffix is
    ignored, so ``"3.1.6-rc0"`` parses as ``(3, 1, 6)``.

    Raises:
        ValueError: If the string does not start with a version number
    """
    match = _VERSION_RE.match(version or "")
    if not match:
        raise ValueError(f"Unrecognized version string: {version!r}")
    return tuple(int(part or 0) for part in match.groups())


def get_server_version(store: BaseStore) -> str:
    """Read the server version from ``store``.

    Raises:
        CapabilityProbeFailure: If the version cannot be retrieved
    """
    try:
        version = store.server_version()
    except Exception as e:
        raise CapabilityProbeFailure(f"Failed to read server version: {e}") from e
    if not version:
        raise CapabilityProbeFailure("Server did not report a version")
    return version


def supports_native_sample(
    store: BaseStore,
    min_version: str = MIN_NATIVE_SAMPLE_VERSION
) -> bool:
    """Return True if the server supports ``$sample``.

    Args:
        store: Store to probe
        min_version: First version known to ship the operator

    Returns:
        True if the reported version is >= ``min_version``, False otherwise
        or when the version cannot be determined
    """
    try:
        version = get_server_version(store)
        supported = parse_version(version) >= parse_version(min_version)
    except (CapabilityProbeFailure, ValueError) as e:
        logger.warning(f"Capability probe failed, assuming no native $sample: {e}")
        return False

    logger.debug(f"Server version {version}, native $sample supported: {supported}")
    return supported
