"""adb-backed device access — shell commands, file pulls, flag reads."""

import logging
import os
import shlex
import subprocess
from typing import Callable

from bugreport_collector.archive import BugReportNotFoundError, is_bugreport_archive

logger = logging.getLogger(__name__)


class AdbCommandError(RuntimeError):
    """An adb invocation failed, timed out, or could not be started."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        if returncode is None:
            message = f"adb command did not complete: {' '.join(command)} ({detail})"
        else:
            message = f"adb command failed ({returncode}): {' '.join(command)} ({detail})"
        super().__init__(message)


class AdbDevice:
    """A single device reached through the adb binary.

    `runner` defaults to subprocess.run and can be replaced to fake adb.
    """

    def __init__(
        self,
        serial: str | None = None,
        adb_path: str = "adb",
        timeout: float = 60.0,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.serial = serial
        self.adb_path = adb_path
        self.timeout = timeout
        self._runner = runner

    @classmethod
    def from_config(cls, config) -> "AdbDevice":
        return cls(
            serial=config.device_serial,
            adb_path=config.adb_path,
            timeout=config.adb_timeout,
        )

    def _adb(self, *args: str) -> str:
        command = [self.adb_path]
        if self.serial:
            command += ["-s", self.serial]
        command += list(args)

        logger.debug("Running: %s", " ".join(command))
        try:
            result = self._runner(
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise AdbCommandError(command, None, f"timed out after {e.timeout}s") from e
        except OSError as e:
            raise AdbCommandError(command, None, str(e)) from e

        if result.returncode != 0:
            raise AdbCommandError(command, result.returncode, result.stderr or "")
        return result.stdout

    def execute_shell_command(self, command: str) -> str:
        """Run a command through `adb shell` and return its stdout."""
        return self._adb("shell", command)

    def pull(self, remote_path: str, local_path: str) -> str:
        parent = os.path.dirname(os.path.abspath(local_path))
        os.makedirs(parent, exist_ok=True)
        self._adb("pull", remote_path, local_path)
        logger.info("Pulled %s -> %s", remote_path, local_path)
        return local_path

    def list_dir(self, remote_dir: str) -> list[str]:
        output = self.execute_shell_command(f"ls {shlex.quote(remote_dir)}")
        return [name.strip() for name in output.splitlines() if name.strip()]

    def get_flag(self, full_name: str) -> bool | None:
        """Read a `{package}.{flag}` feature flag. None when the flag is unset."""
        package, _, flag = full_name.rpartition(".")
        if not package or not flag:
            raise ValueError(f"Flag name must be {{package_name}}.{{flag_name}}: {full_name!r}")
        value = self.execute_shell_command(
            f"device_config get {shlex.quote(package)} {shlex.quote(flag)}"
        ).strip().lower()
        if value in ("true", "1", "enabled"):
            return True
        if value in ("false", "0", "disabled"):
            return False
        return None

    def pull_latest_bugreport(self, remote_dir: str, local_dir: str) -> str:
        """Copy the newest bugreport archive from the device into local_dir."""
        archives = sorted(n for n in self.list_dir(remote_dir) if is_bugreport_archive(n))
        if not archives:
            raise BugReportNotFoundError(f"No bugreport archives on device in {remote_dir}")
        latest = archives[-1]
        remote_path = remote_dir.rstrip("/") + "/" + latest
        return self.pull(remote_path, os.path.join(local_dir, latest))
