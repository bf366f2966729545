"""Helpers for driving Settings > Apps screens on a device."""

import logging
import re
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

SETTINGS_PACKAGE = "com.android.settings"
ALL_APPS_ACTION = "android.settings.MANAGE_ALL_APPLICATIONS_SETTINGS"
KEYCODE_BACK = 4

RESUMED_ACTIVITY_PATTERN = re.compile(
    r"(?:mResumedActivity|topResumedActivity|ResumedActivity)[^{]*\{[^}]*?\s(\S+/\S+)"
)
ALL_APPS_ACTIVITY_MARKERS = ("ManageApplications", "ManageApplicationsActivity")


class ISettingsAppsHelper(ABC):
    """Settings > Apps."""

    @abstractmethod
    def open(self) -> None:
        """Open the screen this helper drives."""

    @abstractmethod
    def exit(self) -> None:
        """Leave the screen."""

    @abstractmethod
    def get_package(self) -> str:
        ...


class ISettingsAllAppsHelper(ISettingsAppsHelper):
    """Settings > Apps > All apps."""

    @abstractmethod
    def is_all_apps_page(self) -> None:
        """Setup expectations: Settings All apps page is open.

        Validates the Settings All apps page; raises AssertionError otherwise.
        """


def parse_resumed_activity(dumpsys_output: str) -> str | None:
    """Return the `package/activity` component of the resumed activity, or None."""
    match = RESUMED_ACTIVITY_PATTERN.search(dumpsys_output)
    return match.group(1) if match else None


class SettingsAllAppsHelper(ISettingsAllAppsHelper):
    """All apps helper that drives the device through adb shell commands."""

    def __init__(self, device):
        self._device = device

    def get_package(self) -> str:
        return SETTINGS_PACKAGE

    def open(self) -> None:
        logger.info("Opening Settings all apps page")
        self._device.execute_shell_command(f"am start -W -a {ALL_APPS_ACTION}")

    def exit(self) -> None:
        self._device.execute_shell_command(f"input keyevent {KEYCODE_BACK}")

    def is_all_apps_page(self) -> None:
        output = self._device.execute_shell_command("dumpsys activity activities")
        component = parse_resumed_activity(output)
        if component is None:
            raise AssertionError("No resumed activity found")
        package = component.split("/", 1)[0]
        if package != SETTINGS_PACKAGE or not any(m in component for m in ALL_APPS_ACTIVITY_MARKERS):
            raise AssertionError(f"Settings all apps page is not open (resumed: {component})")
