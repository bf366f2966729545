"""Output formatters for metric maps — text, JSON, CSV."""

import csv
import io
import json
from typing import Callable

FORMATS = ("text", "json", "csv")


def format_text(metrics: dict[str, float]) -> str:
    """One `key seconds` pair per line, sorted by key."""
    return "\n".join(f"{key} {seconds:.3f}" for key, seconds in sorted(metrics.items()))


def format_json(metrics: dict[str, float]) -> str:
    return json.dumps(dict(sorted(metrics.items())), indent=2)


def format_csv(metrics: dict[str, float]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["key", "seconds"])
    for key, seconds in sorted(metrics.items()):
        writer.writerow([key, f"{seconds:.3f}"])
    return buf.getvalue().rstrip("\n")


def get_formatter(output_format: str = "text") -> Callable[[dict[str, float]], str]:
    """Factory that returns the right formatter for the --output choice."""
    if output_format == "json":
        return format_json
    if output_format == "csv":
        return format_csv
    if output_format == "text":
        return format_text
    raise ValueError(f"Unknown output format: {output_format}")
