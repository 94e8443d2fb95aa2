"""Unit tests for the latest-image metadata resolver."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from himactl.errors import ClockError, MetadataError
from himactl.metadata import MetadataResolver, cache_buster


def _response(content: bytes = b'{"date": "2024-03-01 04:20:00", "file": "PI_H08_20240301_0420_TRC_FLDK_R10_PGPFD.png"}'):
    response = Mock()
    response.content = content
    response.raise_for_status = Mock()
    return response


class TestCacheBuster:
    def test_uses_unix_seconds(self):
        assert cache_buster(lambda: 1700000000.9) == 1700000000

    def test_clock_before_epoch(self):
        with pytest.raises(ClockError):
            cache_buster(lambda: -1.0)


class TestMetadataResolver:
    """Test MetadataResolver against a mocked session."""

    @pytest.fixture
    def session(self):
        session = Mock()
        session.get = Mock(return_value=_response())
        return session

    @pytest.fixture
    def resolver(self, session):
        return MetadataResolver(
            base_url="https://example.com/img/D531106/",
            session=session,
            clock=lambda: 1234.5,
        )

    def test_resolve_latest(self, resolver):
        ts = resolver.resolve_latest()
        assert ts.value == datetime(2024, 3, 1, 4, 20, tzinfo=timezone.utc)

    def test_sends_cache_buster(self, resolver, session):
        """The metadata request always carries a varying query parameter."""
        resolver.resolve_latest()
        args, kwargs = session.get.call_args
        assert args[0] == "https://example.com/img/D531106/latest.json"
        assert kwargs["params"] == {"_": 1234}
        assert kwargs["timeout"] == resolver.timeout

    def test_transport_error(self, resolver, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(MetadataError, match="metadata-transport") as exc_info:
            resolver.resolve_latest()
        assert isinstance(exc_info.value.cause, requests.exceptions.ConnectionError)

    def test_status_error(self, resolver, session):
        response = _response()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=Mock(status_code=503))
        session.get.return_value = response
        with pytest.raises(MetadataError, match="503"):
            resolver.resolve_latest()

    @pytest.mark.parametrize("content", [b"not json", b"{}", b'{"file": "x"}', b"[1, 2]"])
    def test_malformed_document(self, resolver, session, content):
        session.get.return_value = _response(content)
        with pytest.raises(MetadataError, match="metadata-json"):
            resolver.resolve_latest()

    def test_malformed_date(self, resolver, session):
        session.get.return_value = _response(b'{"date": "01/03/2024 04:20", "file": ""}')
        with pytest.raises(MetadataError, match="metadata-date"):
            resolver.resolve_latest()

    def test_clock_failure_is_fatal(self, session):
        resolver = MetadataResolver(session=session, clock=lambda: -5.0)
        with pytest.raises(ClockError):
            resolver.resolve_latest()
        session.get.assert_not_called()
