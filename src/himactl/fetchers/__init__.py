"""Tile fetcher implementations.

- HTTPTileFetcher: plain HTTP/HTTPS downloads with timeouts, retries and progress events

All fetchers implement the TileFetcher interface and raise TileFetchError, tagged
with the failure reason, when a tile cannot be obtained.
"""

from himactl.fetchers.base import TileFetcher
from himactl.fetchers.http import HTTPTileFetcher

__all__ = [
    "TileFetcher",
    "HTTPTileFetcher",
]
