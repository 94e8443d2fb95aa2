import logging
import threading

from himactl.progress.base import LoggingConfig, ProgressReporter


class RichProgressReporter(ProgressReporter):
    """Rich-based progress reporter, one bar for the whole tile batch."""

    def __init__(self):
        try:
            from rich.progress import (
                BarColumn,
                MofNCompleteColumn,
                Progress,
                TextColumn,
                TimeElapsedColumn,
            )
        except ImportError:
            raise ImportError(
                "rich is not installed, please ensure to install it manually or include the extra `himactl[console]`"
            )

        self.progress = Progress(
            TextColumn("[bold green]{task.description}", justify="right"),
            BarColumn(bar_width=None),
            MofNCompleteColumn(),
            "•",
            TextColumn("[red]{task.fields[failed]} failed"),
            "•",
            TimeElapsedColumn(),
        )
        self._active = False
        self._batch = None
        self._failed = 0
        self._lock = threading.Lock()

    @classmethod
    def logging_config(cls) -> LoggingConfig:
        from rich.logging import RichHandler

        return LoggingConfig(format="%(message)s", handlers=[RichHandler(rich_tracebacks=True)])

    def start_batch(self, total_items: int, description: str) -> None:
        self.progress.start()
        self._active = True
        self._failed = 0
        self._batch = self.progress.add_task(description=description or "tiles", total=total_items, failed=0)

    def add_task(self, item_id: str, description: str) -> None:
        # tiles are tracked as a whole, single tasks only advance the batch bar
        pass

    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None:
        if not self._active or self._batch is None:
            return
        with self._lock:
            if not success:
                self._failed += 1
            self.progress.update(self._batch, advance=1, failed=self._failed)

    def end_batch(self, success_count: int, failure_count: int) -> None:
        if self._active:
            self.progress.stop()
            self._active = False
            self._batch = None

    def close(self) -> None:
        if self._active:
            self.progress.stop()
            self._active = False
            logging.getLogger(__name__).debug("Progress display closed")
