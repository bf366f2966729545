"""Bugreport archive discovery and zip entry streaming."""

import fnmatch
import io
import logging
import os
import zipfile
import zlib
from typing import Generator

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "bugreport"
ARCHIVE_SUFFIX = ".zip"
ENTRY_SUFFIX = ".txt"


class BugReportNotFoundError(FileNotFoundError):
    """No bugreport archive (or no text entry inside one) could be found."""


class BugReportArchiveError(Exception):
    """The bugreport archive exists but is not a readable zip file."""


def is_bugreport_archive(name: str) -> bool:
    return name.startswith(ARCHIVE_PREFIX) and name.endswith(ARCHIVE_SUFFIX)


def list_bugreports(directory: str) -> list[str]:
    """Return bugreport archive names in directory, sorted ascending.

    Raises BugReportNotFoundError if the directory does not exist.
    """
    if not os.path.isdir(directory):
        raise BugReportNotFoundError(f"Bugreport directory not found: {directory}")

    return sorted(
        name
        for name in os.listdir(directory)
        if is_bugreport_archive(name) and os.path.isfile(os.path.join(directory, name))
    )


def get_latest_bugreport(directory: str) -> str:
    """Return the newest archive name.

    Archive names embed a YYYY-MM-DD-HH-MM-SS timestamp, so the
    lexicographically greatest name is the most recent one.
    """
    archives = list_bugreports(directory)
    if not archives:
        raise BugReportNotFoundError(f"No bugreport archives found in {directory}")
    latest = archives[-1]
    logger.debug("Latest bugreport in %s: %s (of %d)", directory, latest, len(archives))
    return latest


def find_text_entry(zf: zipfile.ZipFile, archive_name: str) -> str:
    """Pick the text entry matching the archive base name, else any bugreport*.txt."""
    names = zf.namelist()
    expected = os.path.splitext(archive_name)[0] + ENTRY_SUFFIX
    if expected in names:
        return expected

    candidates = [
        n for n in names
        if fnmatch.fnmatch(os.path.basename(n), ARCHIVE_PREFIX + "*" + ENTRY_SUFFIX)
    ]
    if candidates:
        logger.debug("Entry %s missing from %s, using %s", expected, archive_name, candidates[0])
        return candidates[0]

    raise BugReportNotFoundError(f"No bugreport text entry in {archive_name}")


def read_bugreport_lines(directory: str, archive_name: str) -> Generator[str, None, None]:
    """Yield the lines of the bugreport text entry inside the archive."""
    path = os.path.join(directory, archive_name)
    if not os.path.isfile(path):
        raise BugReportNotFoundError(f"Bugreport archive not found: {path}")

    try:
        zf = zipfile.ZipFile(path)
    except zipfile.BadZipFile as e:
        raise BugReportArchiveError(f"Corrupt bugreport archive {path}: {e}") from e

    with zf:
        entry = find_text_entry(zf, archive_name)
        try:
            with zf.open(entry) as raw:
                text = io.TextIOWrapper(raw, encoding="utf-8", errors="replace")
                for line in text:
                    yield line
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise BugReportArchiveError(f"Corrupt bugreport archive {path}: {e}") from e
