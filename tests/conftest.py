import random

import bson
import pytest
from bson.int64 import Int64

from collection_sample.errors import ConnectivityError
from collection_sample.stores.base import BaseStore
from collection_sample.utils.config import load_config


class FakeCursor:
    """Iterator over query results that records whether it was closed."""

    def __init__(self, items):
        self._items = iter(items)
        self.closed = False
        self.consumed = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self.closed:
            raise StopIteration
        item = next(self._items)
        self.consumed += 1
        return item

    def close(self):
        self.closed = True


class FakeStore(BaseStore):
    """In-memory store that understands just enough of MongoDB for sampling.

    Filters support equality and ``$in``; projections support inclusion
    (with optional ``_id: 0``); pipelines support ``$match``, ``$sample``
    and ``$project``. Every call is recorded in ``calls``.
    """

    def __init__(self, collections=None, version="4.4.0", version_error=None, seed=0):
        self.collections = collections or {}
        self.version = version
        self.version_error = version_error
        self.rng = random.Random(seed)
        self.calls = []
        self.cursors = []
        self.fail_on = set()
        # Ids hidden from `$in` lookups, as if deleted after the id scan.
        self.missing_ids = set()

    # -- BaseStore --

    def server_version(self):
        self.calls.append(("server_version", {}))
        if self.version_error is not None:
            raise self.version_error
        return self.version

    def count_documents(self, collection, filter, max_time_ms=None):
        self.calls.append(("count_documents", {
            "collection": collection, "filter": filter, "max_time_ms": max_time_ms,
        }))
        self._maybe_fail("count_documents")
        return len(self._match(collection, filter))

    def find(self, collection, filter, projection=None, sort=None, limit=0,
             max_time_ms=None, raw=False, batch_size=0):
        self.calls.append(("find", {
            "collection": collection, "filter": filter, "projection": projection,
            "sort": sort, "limit": limit, "max_time_ms": max_time_ms,
            "raw": raw, "batch_size": batch_size,
        }))
        self._maybe_fail("find")
        docs = self._match(collection, filter, lookup=True)
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        if limit:
            docs = docs[:limit]
        docs = [self._project(d, projection) for d in docs]
        return self._cursor(docs, raw, batch_size)

    def aggregate(self, collection, pipeline, allow_disk_use=False,
                  max_time_ms=None, batch_size=0, raw=False):
        self.calls.append(("aggregate", {
            "collection": collection, "pipeline": pipeline,
            "allow_disk_use": allow_disk_use, "max_time_ms": max_time_ms,
            "batch_size": batch_size, "raw": raw,
        }))
        self._maybe_fail("aggregate")
        docs = list(self.collections.get(collection, []))
        for stage in pipeline:
            (op, arg), = stage.items()
            if op == "$match":
                prepared = self._prepare(arg)
                docs = [d for d in docs if self._matches(d, prepared)]
            elif op == "$sample":
                docs = self.rng.sample(docs, min(arg["size"], len(docs)))
            elif op == "$project":
                docs = [self._project(d, arg) for d in docs]
            else:
                raise NotImplementedError(op)
        return self._cursor([dict(d) for d in docs], raw, batch_size)

    # -- helpers --

    def calls_to(self, method):
        return [kwargs for name, kwargs in self.calls if name == method]

    def _maybe_fail(self, method):
        if method in self.fail_on:
            raise ConnectivityError(f"{method} failed: connection refused")

    def _match(self, collection, filter, lookup=False):
        docs = self.collections.get(collection, [])
        prepared = self._prepare(filter)
        matched = [d for d in docs if self._matches(d, prepared)]
        if lookup and "_id" in filter and isinstance(filter["_id"], dict):
            matched = [d for d in matched if d["_id"] not in self.missing_ids]
        return matched

    @staticmethod
    def _prepare(filter):
        prepared = {}
        for key, cond in (filter or {}).items():
            if isinstance(cond, dict) and "$in" in cond:
                prepared[key] = ("$in", set(cond["$in"]))
            else:
                prepared[key] = ("$eq", cond)
        return prepared

    @staticmethod
    def _matches(doc, prepared):
        for key, (op, value) in prepared.items():
            if op == "$in":
                if doc.get(key) not in value:
                    return False
            elif doc.get(key) != value:
                return False
        return True

    @staticmethod
    def _project(doc, projection):
        if not projection:
            return dict(doc)
        keep = {k for k, v in projection.items() if v and k != "_id"}
        out = {}
        if projection.get("_id", 1):
            out["_id"] = doc["_id"]
        for key in keep:
            if key in doc:
                out[key] = doc[key]
        return out

    def _cursor(self, docs, raw, batch_size):
        if raw:
            step = batch_size or 101
            docs = [
                b"".join(bson.encode(d) for d in docs[i:i + step])
                for i in range(0, len(docs), step)
            ]
        cursor = FakeCursor(docs)
        self.cursors.append(cursor)
        return cursor


def make_haystack(count):
    return [
        {
            "_id": f"needle_{i:05d}",
            "is_even": i % 2,
            "long": Int64(1234567890),
            "double": 0.23456,
            "int": 1234,
        }
        for i in range(count)
    ]


# ============== Fixtures ==============

@pytest.fixture
def config():
    """Default thresholds."""
    return load_config()


@pytest.fixture
def make_store():
    """Factory for a FakeStore holding a `haystack` collection."""
    def _make(count=1000, version="4.4.0", **kwargs):
        return FakeStore({"haystack": make_haystack(count)}, version=version, **kwargs)
    return _make


@pytest.fixture
def store(make_store):
    """FakeStore with 1000 haystack documents on a modern server."""
    return make_store()
