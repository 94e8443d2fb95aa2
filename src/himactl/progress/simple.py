import logging
import threading

from himactl.progress.base import ProgressReporter


class SimpleProgressReporter(ProgressReporter):
    """Simple text-based progress reporter using logging."""

    def __init__(self):
        self.log = logging.getLogger(__name__)
        self.total_items = 0
        self.completed = 0
        self.failed = 0
        self._lock = threading.Lock()

    def start_batch(self, total_items: int, description: str) -> None:
        self.total_items = total_items
        self.completed = 0
        self.failed = 0
        self.log.info("Tracking progress for %d %s", total_items, description or "items")

    def add_task(self, item_id: str, description: str) -> dict:
        self.log.debug("Started %s - %s", description, item_id)
        return {"item_id": item_id, "description": description}

    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None:
        with self._lock:
            if success:
                self.completed += 1
            else:
                self.failed += 1
            done = self.completed + self.failed
        remaining = self.total_items - done
        description = description or ""
        status = f"✓ {description}" if success else f"✗ {description}"

        self.log.info(
            "%s - %s (%d/%d, %d remaining)",
            status,
            item_id,
            done,
            self.total_items,
            remaining,
        )

    def end_batch(self, success_count: int, failure_count: int) -> None:
        self.log.info(
            "Tracking completed: %d successful, %d failed, %d total",
            success_count,
            failure_count,
            success_count + failure_count,
        )
