"""Tests for bugreport_collector/watcher.py"""

import os
import tempfile
import unittest
from types import SimpleNamespace

from bugreport_collector.helper import BugReportDurationHelper
from bugreport_collector.watcher import BugReportWatcher
from conftest import DUMPSTATE_BOARD, DUMPSYS_MEMINFO, write_archive, write_crc_corrupt_archive


def _event(path, is_directory=False):
    return SimpleNamespace(src_path=path, dest_path=path, is_directory=is_directory)


class TestBugReportWatcher(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.reports = []
        self.watcher = BugReportWatcher(
            BugReportDurationHelper(self.tmpdir),
            lambda name, metrics: self.reports.append((name, metrics)),
        )

    def test_created_archive_is_reported(self):
        path = write_archive(self.tmpdir, "bugreport-2023-04-27-23-50-00", [DUMPSTATE_BOARD])
        self.watcher.on_created(_event(path))
        self.assertEqual(
            self.reports,
            [("bugreport-2023-04-27-23-50-00.zip", {"bugreport-duration-dumpstate_board()": 44.619})],
        )

    def test_moved_in_archive_is_reported(self):
        path = write_archive(self.tmpdir, "bugreport", [DUMPSYS_MEMINFO])
        self.watcher.on_moved(_event(path))
        self.assertEqual(len(self.reports), 1)

    def test_ignores_other_files(self):
        other = os.path.join(self.tmpdir, "notes.txt")
        with open(other, "w") as f:
            f.write("x\n")
        self.watcher.on_created(_event(other))
        self.watcher.on_created(_event(self.tmpdir, is_directory=True))
        self.assertEqual(self.reports, [])

    def test_debounces_repeated_events(self):
        path = write_archive(self.tmpdir, "bugreport", [DUMPSTATE_BOARD])
        self.watcher.on_created(_event(path))
        self.watcher.on_closed(_event(path))
        self.assertEqual(len(self.reports), 1)

    def test_archive_written_after_create_is_reported_on_close(self):
        path = os.path.join(self.tmpdir, "bugreport-2023-01-01-00-00-00.zip")
        open(path, "wb").close()
        self.watcher.on_created(_event(path))
        self.assertEqual(self.reports, [])

        write_archive(self.tmpdir, "bugreport-2023-01-01-00-00-00", [DUMPSTATE_BOARD])
        self.watcher.on_closed(_event(path))
        self.assertEqual(
            self.reports,
            [("bugreport-2023-01-01-00-00-00.zip", {"bugreport-duration-dumpstate_board()": 44.619})],
        )

        self.watcher.on_closed(_event(path))
        self.assertEqual(len(self.reports), 1)

    def test_crc_corrupt_archive_is_skipped(self):
        path = write_crc_corrupt_archive(self.tmpdir, "bugreport", [DUMPSTATE_BOARD])
        self.watcher.on_created(_event(path))
        self.assertEqual(self.reports, [])

    def test_partial_archive_is_skipped(self):
        path = os.path.join(self.tmpdir, "bugreport.zip")
        with open(path, "wb") as f:
            f.write(b"PK\x03\x04 truncated")
        self.assertIsNone(self.watcher.process_archive("bugreport.zip"))
        self.assertEqual(self.reports, [])

    def test_process_existing_oldest_first(self):
        write_archive(self.tmpdir, "bugreport-2022-04-23-03-12-33", [DUMPSYS_MEMINFO])
        write_archive(self.tmpdir, "bugreport-2021-12-28-10-32-10", [DUMPSTATE_BOARD])
        self.watcher.process_existing()
        self.assertEqual(
            [name for name, _ in self.reports],
            ["bugreport-2021-12-28-10-32-10.zip", "bugreport-2022-04-23-03-12-33.zip"],
        )


if __name__ == "__main__":
    unittest.main()
