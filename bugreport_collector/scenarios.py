"""Device scenarios — named steps that issue shell commands on a device."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

_SCENARIOS: dict[str, Callable] = {}

MEDIA_TEMPLATE_ACTION = "android.car.intent.action.MEDIA_TEMPLATE"
MEDIA_COMPONENT_EXTRA = "android.car.intent.extra.MEDIA_COMPONENT"
BLUETOOTH_MEDIA_COMPONENT = (
    "com.android.bluetooth/com.android.bluetooth.avrcpcontroller.BluetoothMediaBrowseService"
)


def scenario(name: str):
    """Register a scenario callable under name."""
    def decorator(func: Callable) -> Callable:
        if name in _SCENARIOS:
            raise ValueError(f"Scenario already registered: {name}")
        _SCENARIOS[name] = func
        return func
    return decorator


def get_scenario(name: str) -> Callable:
    try:
        return _SCENARIOS[name]
    except KeyError:
        raise KeyError(f"Unknown scenario: {name}") from None


def list_scenarios() -> list[str]:
    return sorted(_SCENARIOS)


def run_scenario(name: str, device) -> str:
    """Run a registered scenario and return its shell output."""
    func = get_scenario(name)
    logger.info("Running scenario %s", name)
    return func(device)


@scenario("open-bluetooth-media")
def open_media(device) -> str:
    """Opens the Bluetooth media application."""
    return device.execute_shell_command(
        f"am start -a {MEDIA_TEMPLATE_ACTION} -e {MEDIA_COMPONENT_EXTRA} {BLUETOOTH_MEDIA_COMPONENT}"
    )
