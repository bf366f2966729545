"""Bugreport duration line parser — compiled regexes + frozen dataclasses."""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

# Substrings used to select candidate lines from the raw bugreport text.
DUMPSTATE_DURATION_FILTER = "was the duration of '"
DUMPSYS_DURATION_FILTER = "was the duration of dumpsys"
SHOWMAP_FILTER = "SHOW MAP"

DUMPSTATE_PATTERN = re.compile(
    r"^-{6}\s+(\d+(?:\.\d+)?)s was the duration of '(.*)'\s+-{6}$"
)
DUMPSYS_PATTERN = re.compile(
    r"^-{9}\s+(\d+(?:\.\d+)?)s was the duration of dumpsys (.+?), ending at: .*$"
)

DUMPSTATE_KEY_PREFIX = "bugreport-duration-"
DUMPSYS_KEY_PREFIX = "bugreport-dumpsys-duration-"

INVALID_DURATION = -1.0


@dataclass(frozen=True)
class DurationMetric:
    key: str
    section: str
    seconds: float
    kind: str  # "dumpstate" or "dumpsys"


class BugReportDurationLines:
    """Immutable, ordered view over the duration lines of one bugreport."""

    __slots__ = ("_lines",)

    def __init__(self, lines: Iterable[str] = ()):
        self._lines = tuple(lines)

    def __contains__(self, line) -> bool:
        return line in self._lines

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index):
        return self._lines[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, BugReportDurationLines):
            return NotImplemented
        return self._lines == other._lines

    def __hash__(self) -> int:
        return hash(self._lines)

    def __repr__(self) -> str:
        return f"BugReportDurationLines({len(self._lines)} lines)"


def is_duration_line(line: str) -> bool:
    """True if the line reports a dumpstate or dumpsys duration (showmap excluded)."""
    if SHOWMAP_FILTER in line:
        return False
    return DUMPSTATE_DURATION_FILTER in line or DUMPSYS_DURATION_FILTER in line


def filter_lines(lines: Iterable[str]) -> BugReportDurationLines:
    """Keep only duration lines, in their original order, without line endings."""
    return BugReportDurationLines(
        stripped
        for stripped in (line.rstrip("\r\n") for line in lines)
        if is_duration_line(stripped)
    )


def parse_decimal_duration(line: str) -> float:
    """Return the duration in seconds from either line format, or -1.0."""
    stripped = line.strip()
    match = DUMPSTATE_PATTERN.match(stripped) or DUMPSYS_PATTERN.match(stripped)
    if not match:
        return INVALID_DURATION
    try:
        return float(match.group(1))
    except ValueError:
        return INVALID_DURATION


def parse_dumpstate_section(line: str) -> str | None:
    """Return the quoted section name of a dumpstate line, or None."""
    match = DUMPSTATE_PATTERN.match(line.strip())
    return match.group(2) if match else None


def parse_dumpsys_section(line: str) -> str | None:
    """Return the service name of a dumpsys line, or None."""
    match = DUMPSYS_PATTERN.match(line.strip())
    return match.group(2) if match else None


def convert_dumpstate_section_to_key(section: str) -> str:
    # PROCESSES AND THREADS -> bugreport-duration-processes-and-threads
    return DUMPSTATE_KEY_PREFIX + section.lower().replace(" ", "-")


def convert_dumpsys_section_to_key(section: str) -> str:
    return DUMPSYS_KEY_PREFIX + section


def parse_line(line: str) -> DurationMetric | None:
    """Parse a single duration line into a DurationMetric. None for other lines."""
    seconds = parse_decimal_duration(line)
    if seconds == INVALID_DURATION:
        return None

    section = parse_dumpstate_section(line)
    if section is not None:
        return DurationMetric(
            key=convert_dumpstate_section_to_key(section),
            section=section,
            seconds=seconds,
            kind="dumpstate",
        )

    section = parse_dumpsys_section(line)
    if section is not None:
        return DurationMetric(
            key=convert_dumpsys_section_to_key(section),
            section=section,
            seconds=seconds,
            kind="dumpsys",
        )
    return None


def parse_lines(lines: Iterable[str]) -> list[DurationMetric]:
    """Parse every line, skipping the ones that are not duration lines."""
    metrics = (parse_line(line) for line in lines)
    return [m for m in metrics if m is not None]


def to_metric_map(metrics: Iterable[DurationMetric]) -> dict[str, float]:
    """Collapse parsed records into key -> seconds. Later duplicates win."""
    return {m.key: m.seconds for m in metrics}
