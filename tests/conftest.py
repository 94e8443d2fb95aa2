"""Pytest configuration and shared fixtures."""

import io
import logging
from datetime import datetime, timezone

import pytest
from PIL import Image

from himactl.model import ImageTimestamp

log = logging.getLogger(__name__)


def pytest_addoption(parser):
    parser.addoption("--slow", action="store", default=False, help="Run slow tests")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--slow"):
        # --slow given in cli: do not skip slow tests
        return
    skip_slow = pytest.mark.skip(reason="Marked as slow, skipping")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test away from any local config.yml/.env and with fresh settings."""
    from himactl.config import reset_settings

    monkeypatch.chdir(tmp_path)
    for name in ("LEVEL", "MARGINS", "OUTPUT_FORMAT", "OUTPUT_DIR", "FORCE", "STORE_LATEST_ONLY"):
        monkeypatch.delenv(f"HIMACTL_{name}", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def timestamp():
    """The acquisition time used across the tests, 2024-03-01 04:20:00 UTC."""
    return ImageTimestamp(value=datetime(2024, 3, 1, 4, 20, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_tile():
    """Factory for solid colour RGBA tiles."""

    def _make(color=(255, 0, 0, 255), size=550):
        return Image.new("RGBA", (size, size), color)

    return _make


@pytest.fixture
def png_bytes(make_tile):
    """Factory returning encoded PNG bytes of a solid tile."""

    def _encode(color=(10, 20, 30, 255), size=550):
        buffer = io.BytesIO()
        make_tile(color, size).save(buffer, format="PNG")
        return buffer.getvalue()

    return _encode
