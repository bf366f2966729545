"""Statistics — totals per section kind and slowest sections."""

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from bugreport_collector.parser import DurationMetric


@dataclass
class DurationStats:
    total_sections: int = 0
    section_counts: dict[str, int] = field(default_factory=dict)
    total_seconds: dict[str, float] = field(default_factory=dict)
    slowest: list[tuple[str, float]] = field(default_factory=list)


def compute_stats(metrics: Iterable[DurationMetric], top_n: int = 10) -> DurationStats:
    """Consume parsed metrics and aggregate them by kind."""
    kind_counter = Counter()
    kind_seconds: dict[str, float] = {}
    by_key: dict[str, float] = {}

    for metric in metrics:
        kind_counter[metric.kind] += 1
        kind_seconds[metric.kind] = kind_seconds.get(metric.kind, 0.0) + metric.seconds
        by_key[metric.key] = metric.seconds

    slowest = sorted(by_key.items(), key=lambda item: (-item[1], item[0]))
    return DurationStats(
        total_sections=sum(kind_counter.values()),
        section_counts=dict(kind_counter.most_common()),
        total_seconds={k: round(v, 3) for k, v in sorted(kind_seconds.items())},
        slowest=slowest[:top_n] if top_n > 0 else [],
    )


def format_stats_text(stats: DurationStats) -> str:
    """Human-readable stats summary."""
    lines = []
    lines.append(f"Total sections: {stats.total_sections}")
    lines.append("")

    lines.append("Sections by kind:")
    for kind, count in stats.section_counts.items():
        total = stats.total_seconds.get(kind, 0.0)
        lines.append(f"  {kind:10s} {count:5d}  {total:10.3f}s")
    lines.append("")

    if stats.slowest:
        lines.append(f"Slowest sections ({len(stats.slowest)}):")
        for key, seconds in stats.slowest:
            lines.append(f"  {seconds:10.3f}s  {key}")
    else:
        lines.append("No duration sections.")

    return "\n".join(lines)


def format_stats_json(stats: DurationStats) -> str:
    """JSON stats output."""
    return json.dumps({
        "total_sections": stats.total_sections,
        "section_counts": stats.section_counts,
        "total_seconds": stats.total_seconds,
        "slowest": [{"key": k, "seconds": s} for k, s in stats.slowest],
    }, indent=2)
