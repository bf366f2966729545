"""Bugreport watcher — parses new archives as they land in the bugreport directory."""

import logging
import os
import time
from typing import Callable

from watchdog.events import FileSystemEventHandler

from bugreport_collector.archive import (
    BugReportArchiveError,
    BugReportNotFoundError,
    is_bugreport_archive,
    list_bugreports,
)
from bugreport_collector.helper import BugReportDurationHelper
from bugreport_collector.parser import to_metric_map

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5


class BugReportWatcher(FileSystemEventHandler):
    """Watches for bugreport*.zip creation and reports each archive's metrics."""

    def __init__(self, helper: BugReportDurationHelper,
                 on_metrics: Callable[[str, dict[str, float]], None]):
        super().__init__()
        self._helper = helper
        self._on_metrics = on_metrics
        self._last_processed: dict[str, float] = {}

    def on_created(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._handle(event.dest_path)

    def on_closed(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def _handle(self, filepath: str):
        """Debounce and process a bugreport archive."""
        name = os.path.basename(filepath)
        if not is_bugreport_archive(name):
            return
        now = time.time()
        last = self._last_processed.get(name, 0)
        if now - last < DEBOUNCE_SECONDS:
            return
        # Failed reads (archive still being written) leave the window open.
        if self.process_archive(name) is not None:
            self._last_processed[name] = now

    def process_archive(self, archive_name: str) -> dict[str, float] | None:
        """Parse one archive and hand its metrics to the callback."""
        logger.info("Processing: %s", archive_name)
        try:
            metrics = self._helper.get_duration_metrics(archive_name)
        except (BugReportNotFoundError, BugReportArchiveError) as e:
            # Archives are often still being written when the event fires.
            logger.warning("Skipping %s: %s", archive_name, e)
            return None

        result = to_metric_map(metrics)
        self._on_metrics(archive_name, result)
        return result

    def process_existing(self):
        """Report the archives already present at startup, oldest first."""
        for name in list_bugreports(self._helper.bugreport_dir):
            self._last_processed[name] = time.time()
            self.process_archive(name)
