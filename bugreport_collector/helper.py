"""BugReportDurationHelper — collects per-section durations from the newest bugreport."""

import logging

from bugreport_collector import archive, parser
from bugreport_collector.parser import BugReportDurationLines, DurationMetric

logger = logging.getLogger(__name__)

DEFAULT_BUGREPORT_DIR = "/data/user_de/0/com.android.shell/files/bugreports/"


class BugReportDurationHelper:
    """Extracts dumpstate and dumpsys section durations from a bugreport archive.

    Follows the collector lifecycle: start_collecting(), get_metrics(),
    stop_collecting(). Start and stop hold no state; every get_metrics()
    call reads the newest archive in the bugreport directory.
    """

    def __init__(self, bugreport_dir: str = DEFAULT_BUGREPORT_DIR):
        self.bugreport_dir = bugreport_dir

    def start_collecting(self) -> bool:
        logger.debug("Started collecting bugreport durations from %s", self.bugreport_dir)
        return True

    def stop_collecting(self) -> bool:
        logger.debug("Stopped collecting bugreport durations")
        return True

    def get_metrics(self) -> dict[str, float]:
        """Return key -> seconds for the newest bugreport. Empty if none is readable."""
        try:
            metrics = self.get_duration_metrics()
        except (archive.BugReportNotFoundError, archive.BugReportArchiveError) as e:
            logger.error("Unable to collect bugreport durations: %s", e)
            return {}
        return parser.to_metric_map(metrics)

    def get_duration_metrics(self, archive_name: str | None = None) -> list[DurationMetric]:
        """Parse one archive (the newest by default) into DurationMetric records."""
        if archive_name is None:
            archive_name = self.get_latest_bugreport()
        lines = self.extract_and_filter_bugreport(archive_name)
        metrics = parser.parse_lines(lines)
        logger.info(
            "Parsed %d duration metric(s) from %s (%d candidate lines)",
            len(metrics), archive_name, len(lines),
        )
        return metrics

    def get_latest_bugreport(self) -> str:
        return archive.get_latest_bugreport(self.bugreport_dir)

    def extract_and_filter_bugreport(self, archive_name: str) -> BugReportDurationLines:
        """Read the archive's text entry and keep only duration lines."""
        return parser.filter_lines(
            archive.read_bugreport_lines(self.bugreport_dir, archive_name)
        )

    # Line-level helpers, exposed on the collector for callers and tests.

    def parse_decimal_duration(self, line: str) -> float:
        return parser.parse_decimal_duration(line)

    def parse_dumpstate_section(self, line: str) -> str | None:
        return parser.parse_dumpstate_section(line)

    def parse_dumpsys_section(self, line: str) -> str | None:
        return parser.parse_dumpsys_section(line)

    def convert_dumpstate_section_to_key(self, section: str) -> str:
        return parser.convert_dumpstate_section_to_key(section)

    def convert_dumpsys_section_to_key(self, section: str) -> str:
        return parser.convert_dumpsys_section_to_key(section)
