"""Progress reporting implementations for tile downloads.

This package provides progress reporters that follow the tile batch:
- EmptyProgressReporter: No-op reporter for silent operation
- SimpleProgressReporter: Basic text-based progress output
- RichProgressReporter: Enhanced terminal UI with a progress bar

All reporters implement the ProgressReporter interface, subscribe to the event bus,
and can be configured via the registry system.
"""

from typing import Any

from himactl.progress.base import EmptyProgressReporter, LoggingConfig, ProgressReporter
from himactl.progress.rich import RichProgressReporter
from himactl.progress.simple import SimpleProgressReporter
from himactl.registry import Registry

registry = Registry[ProgressReporter](name="reporter")
registry.register("empty", EmptyProgressReporter)
registry.register("simple", SimpleProgressReporter)
registry.register("rich", RichProgressReporter)

__all__ = [
    "ProgressReporter",
    "EmptyProgressReporter",
    "SimpleProgressReporter",
    "RichProgressReporter",
    "LoggingConfig",
]


def create_reporter(reporter_name: str, **kwargs: dict[str, Any]) -> ProgressReporter:
    config = kwargs or {}
    return registry.create(reporter_name, **config)
