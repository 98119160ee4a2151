"""Tests for server capability detection."""

import pytest

from collection_sample.capability import (
    MIN_NATIVE_SAMPLE_VERSION,
    get_server_version,
    parse_version,
    supports_native_sample,
)
from collection_sample.errors import CapabilityProbeFailure


class TestParseVersion:
    @pytest.mark.parametrize("version, expected", [
        ("3.1.6", (3, 1, 6)),
        ("3.1.6-rc0", (3, 1, 6)),
        ("4.4", (4, 4, 0)),
        ("7", (7, 0, 0)),
        ("v5.0.3", (5, 0, 3)),
        ("3.10.1", (3, 10, 1)),
    ])
    def test_parses(self, version, expected):
        assert parse_version(version) == expected

    @pytest.mark.parametrize("version", ["", "unknown", None])
    def test_rejects_garbage(self, version):
        with pytest.raises(ValueError):
            parse_version(version)

    def test_numeric_not_lexicographic(self):
        assert parse_version("3.10.0") > parse_version("3.9.9")


class TestSupportsNativeSample:
    def test_minimum_version_constant(self):
        assert MIN_NATIVE_SAMPLE_VERSION == "3.1.6"

    @pytest.mark.parametrize("version, supported", [
        ("3.1.5", False),
        ("3.1.6", True),
        ("3.1.7", True),
        ("3.0.15", False),
        ("6.0.0", True),
    ])
    def test_version_threshold(self, make_store, version, supported):
        assert supports_native_sample(make_store(0, version=version)) is supported

    def test_failed_probe_is_unsupported(self, make_store, caplog):
        store = make_store(0, version_error=OSError("connection reset"))

        with caplog.at_level("WARNING"):
            assert supports_native_sample(store) is False
        assert "Capability probe failed" in caplog.text

    def test_missing_version_is_unsupported(self, make_store):
        assert supports_native_sample(make_store(0, version=None)) is False

    def test_custom_minimum(self, make_store):
        store = make_store(0, version="4.2.0")
        assert supports_native_sample(store, min_version="4.4") is False
        assert supports_native_sample(store, min_version="4.2") is True


class TestGetServerVersion:
    def test_returns_version(self, make_store):
        assert get_server_version(make_store(0, version="5.0.1")) == "5.0.1"

    def test_wraps_errors(self, make_store):
        store = make_store(0, version_error=RuntimeError("boom"))

        with pytest.raises(CapabilityProbeFailure, match="boom") as excinfo:
            get_server_version(store)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
