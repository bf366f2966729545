"""Shared pytest fixtures — bugreport archives and a fake adb runner."""

import os
import subprocess
import zipfile

import pytest

DUMPSTATE_BOARD = "------ 44.619s was the duration of 'dumpstate_board()' ------"
DUMPSTATE_DUMPSYS = "------ 21.397s was the duration of 'DUMPSYS' ------"
DUMPSTATE_CRITICAL = "------ 0.022s was the duration of 'DUMPSYS CRITICAL PROTO' ------"
DUMPSYS_SURFACEFLINGER = (
    "--------- 0.051s was the duration of dumpsys SurfaceFlinger, ending at: 2023-04-27 23:50:35"
)
DUMPSYS_MEMINFO = (
    "--------- 24.741s was the duration of dumpsys meminfo, ending at: 2023-04-27 23:51:38"
)
SHOWMAP_LINE = "------ 0.076s was the duration of 'SHOW MAP 22930 (com.android.chrome)' ------"

SAMPLE_LINES = [
    DUMPSTATE_BOARD,
    DUMPSTATE_DUMPSYS,
    DUMPSTATE_CRITICAL,
    DUMPSYS_SURFACEFLINGER,
    DUMPSYS_MEMINFO,
    "unrelated log line",
]


def write_archive(directory: str, name: str, lines: list[str], entry_name: str | None = None) -> str:
    """Create name.zip holding an identically named .txt entry with the given lines."""
    path = os.path.join(directory, name + ".zip")
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr(entry_name or name + ".txt", "".join(line + "\n" for line in lines))
    return path


def write_crc_corrupt_archive(directory: str, name: str, lines: list[str]) -> str:
    """Create a stored archive whose entry data no longer matches its CRC-32."""
    path = write_archive(directory, name, lines)
    with open(path, "rb") as f:
        data = bytearray(f.read())
    offset = data.find(lines[0].encode())
    data[offset] ^= 0x01
    with open(path, "wb") as f:
        f.write(bytes(data))
    return path


@pytest.fixture()
def bugreport_dir(tmp_path) -> str:
    return str(tmp_path)


@pytest.fixture()
def make_archive(bugreport_dir):
    def _make(name: str = "bugreport", lines: list[str] | None = None, entry_name: str | None = None) -> str:
        return write_archive(bugreport_dir, name, SAMPLE_LINES if lines is None else lines, entry_name)
    return _make


class FakeAdb:
    """Stands in for subprocess.run; records commands and replays canned results."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.responses: list[tuple[str, int, str]] = []
        self.default = ("", 0, "")
        self.raise_on_call: BaseException | None = None

    def queue(self, stdout: str = "", returncode: int = 0, stderr: str = ""):
        self.responses.append((stdout, returncode, stderr))

    def __call__(self, command, **kwargs):
        self.calls.append(list(command))
        if self.raise_on_call is not None:
            raise self.raise_on_call
        stdout, returncode, stderr = self.responses.pop(0) if self.responses else self.default
        return subprocess.CompletedProcess(command, returncode, stdout, stderr)


@pytest.fixture()
def fake_adb() -> FakeAdb:
    return FakeAdb()
