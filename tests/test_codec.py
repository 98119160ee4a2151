"""Tests for raw batch splitting and numeric promotion."""

import bson
import pytest
from bson.errors import InvalidBSON
from bson.int64 import Int64

from collection_sample.codec import promote_values, split_raw_batch, split_raw_batches


DOCS = [
    {"_id": "needle_1", "is_even": 1},
    {"_id": "needle_2", "nested": {"a": [1, 2, 3]}},
    {"_id": "needle_3", "text": "x" * 300},
]


class TestSplitRawBatch:
    def test_splits_concatenated_documents(self):
        batch = b"".join(bson.encode(d) for d in DOCS)

        units = list(split_raw_batch(batch))

        assert units == [bson.encode(d) for d in DOCS]
        assert [bson.decode(u) for u in units] == DOCS

    def test_empty_batch(self):
        assert list(split_raw_batch(b"")) == []

    def test_flattens_batches(self):
        batches = [bson.encode(DOCS[0]) + bson.encode(DOCS[1]), bson.encode(DOCS[2])]
        assert len(list(split_raw_batches(batches))) == 3

    def test_truncated_document(self):
        batch = bson.encode(DOCS[0]) + bson.encode(DOCS[1])[:-4]

        units = split_raw_batch(batch)
        with pytest.raises(ValueError, match="Malformed BSON") as exc_info:
            next(units)
        assert isinstance(exc_info.value.__cause__, InvalidBSON)

    def test_truncated_batch_yields_nothing(self):
        batch = bson.encode(DOCS[0]) + bson.encode(DOCS[1]) + bson.encode(DOCS[2])[:-2]

        yielded = []
        with pytest.raises(ValueError):
            for unit in split_raw_batch(batch):
                yielded.append(unit)
        assert yielded == []

    def test_trailing_garbage(self):
        with pytest.raises(ValueError, match="Malformed BSON"):
            list(split_raw_batch(bson.encode(DOCS[0]) + b"\x01\x00"))

    def test_bad_document_terminator(self):
        encoded = bytearray(bson.encode(DOCS[0]))
        encoded[-1] = 0x01
        with pytest.raises(ValueError, match="Malformed BSON"):
            list(split_raw_batch(bytes(encoded)))


class TestPromoteValues:
    def test_promotes_nested_int64(self):
        doc = {
            "long": Int64(5),
            "inner": {"long": Int64(6), "list": [Int64(7), {"deep": Int64(8)}]},
            "double": 0.5,
            "text": "abc",
        }

        promoted = promote_values(doc)

        assert promoted == {
            "long": 5,
            "inner": {"long": 6, "list": [7, {"deep": 8}]},
            "double": 0.5,
            "text": "abc",
        }
        assert type(promoted["long"]) is int
        assert type(promoted["inner"]["list"][0]) is int
        assert type(promoted["inner"]["list"][1]["deep"]) is int

    def test_leaves_original_untouched(self):
        doc = {"long": Int64(5)}
        promote_values(doc)
        assert isinstance(doc["long"], Int64)
