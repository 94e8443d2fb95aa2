import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from himactl.model import ProgressEvent, ProgressEventType
from himactl.progress.events import get_bus

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@dataclass
class LoggingConfig:
    format: str = DEFAULT_LOG_FORMAT
    handlers: list[logging.Handler] | None = field(default=None)


class ProgressReporter(ABC):
    """Turns progress events coming from the bus into user feedback."""

    @classmethod
    def logging_config(cls) -> LoggingConfig:
        return LoggingConfig()

    def start(self) -> None:
        get_bus().subscribe(self.handle)

    def stop(self) -> None:
        get_bus().unsubscribe(self.handle)
        self.close()

    def handle(self, event: ProgressEvent) -> None:
        match event.type:
            case ProgressEventType.BATCH_STARTED:
                self.start_batch(event.data.get("total_items", 0), event.data.get("description", ""))
            case ProgressEventType.TASK_CREATED:
                self.add_task(event.task_id, event.data.get("description", ""))
            case ProgressEventType.TASK_COMPLETED:
                self.end_task(event.task_id, event.data.get("success", False), event.data.get("description"))
            case ProgressEventType.BATCH_COMPLETED:
                self.end_batch(event.data.get("success_count", 0), event.data.get("failure_count", 0))

    @abstractmethod
    def start_batch(self, total_items: int, description: str) -> None: ...

    @abstractmethod
    def add_task(self, item_id: str, description: str) -> Any: ...

    @abstractmethod
    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None: ...

    @abstractmethod
    def end_batch(self, success_count: int, failure_count: int) -> None: ...

    def close(self) -> None:
        pass


class EmptyProgressReporter(ProgressReporter):
    """
    Empty reporter to avoid continuos checks against None
    """

    def start_batch(self, total_items: int, description: str) -> None:
        pass

    def add_task(self, item_id: str, description: str) -> Any:
        pass

    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None:
        pass

    def end_batch(self, success_count: int, failure_count: int) -> None:
        pass
