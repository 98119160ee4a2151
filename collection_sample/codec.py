"""BSON helpers for sampled documents.

Raw cursors hand back batches of concatenated BSON documents; consumers of a
sample expect one buffer per document.
"""

from collections.abc import Mapping
from typing import Any, Iterable, Iterator

from bson import decode_all
from bson.codec_options import CodecOptions
from bson.errors import InvalidBSON
from bson.int64 import Int64
from bson.raw_bson import RawBSONDocument


RAW_CODEC_OPTIONS = CodecOptions(document_class=RawBSONDocument)


def split_raw_batch(batch: bytes) -> Iterator[bytes]:
    """Split one raw batch into self-contained BSON document buffers.

    The whole batch is checked before anything is yielded, so a malformed
    batch never produces a partial record.

    Args:
        batch: Concatenated BSON documents

    Yields:
        One ``bytes`` object per document

    Raises:
        ValueError: If the batch holds a truncated or malformed document
    """
    try:
        documents = decode_all(batch, RAW_CODEC_OPTIONS)
    except InvalidBSON as e:
        raise ValueError(f"Malformed BSON in raw batch of {len(batch)} bytes: {e}") from e

    for document in documents:
        yield document.raw


def split_raw_batches(batches: Iterable[bytes]) -> Iterator[bytes]:
    """Flatten raw cursor batches into per-document buffers."""
    for batch in batches:
        yield from split_raw_batch(batch)


def promote_values(value: Any) -> Any:
    """Convert BSON numeric wrappers to plain Python numbers, recursively."""
    if isinstance(value, Int64):
        return int(value)
    if isinstance(value, Mapping):
        return {k: promote_values(v) for k, v in value.items()}
    if isinstance(value, list):
        return [promote_values(v) for v in value]
    return value
