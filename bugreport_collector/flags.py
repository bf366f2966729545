"""Feature-flag gating for tests — requires_flags_off / requires_flags_on.

The decorators only tag the test callable or class. A runner (or a
fixture) asks check_flags() whether the test may run against the current
flag values and skips it with the returned reason otherwise.

If a declaration of the same kind is present on both the class and the
test method, the method's declaration wins and the class one is ignored.
"""

import logging
import re
from typing import Callable, Mapping

logger = logging.getLogger(__name__)

FLAGS_OFF_ATTR = "__requires_flags_off__"
FLAGS_ON_ATTR = "__requires_flags_on__"

# {package_name}.{flag_name}
FLAG_NAME_PATTERN = re.compile(r"^[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)+$")


def _validate(flags: tuple[str, ...]) -> tuple[str, ...]:
    if not flags:
        raise ValueError("At least one flag name is required")
    for flag in flags:
        if not isinstance(flag, str) or not FLAG_NAME_PATTERN.match(flag):
            raise ValueError(
                f"Flag name must be {{package_name}}.{{flag_name}}: {flag!r}"
            )
    return flags


def requires_flags_off(*flags: str):
    """Run the test only when every listed flag is off."""
    required = _validate(flags)

    def decorator(target):
        setattr(target, FLAGS_OFF_ATTR, required)
        return target

    return decorator


def requires_flags_on(*flags: str):
    """Run the test only when every listed flag is on."""
    required = _validate(flags)

    def decorator(target):
        setattr(target, FLAGS_ON_ATTR, required)
        return target

    return decorator


def _declared(target, attr: str) -> tuple[str, ...] | None:
    # Look only at the object itself so a class declaration is not read back
    # through attribute lookup on its methods.
    func = getattr(target, "__func__", target)
    return getattr(func, "__dict__", {}).get(attr)


def get_required_flags(test, owner=None) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return (flags_off, flags_on) for a test, method level taking precedence.

    owner is the test class; for bound methods it is taken from the instance.
    """
    if owner is None and hasattr(test, "__self__"):
        owner = test.__self__
    if owner is not None and not isinstance(owner, type):
        owner = type(owner)

    def resolve(attr: str) -> tuple[str, ...]:
        method_level = _declared(test, attr)
        if method_level is not None:
            return method_level
        if owner is not None:
            for klass in getattr(owner, "__mro__", (owner,)):
                class_level = _declared(klass, attr)
                if class_level is not None:
                    return class_level
        return ()

    return resolve(FLAGS_OFF_ATTR), resolve(FLAGS_ON_ATTR)


def check_flags(test, flag_values: Mapping[str, bool | None] | Callable[[str], bool | None],
                owner=None) -> str | None:
    """Return a skip reason if the test's flag requirements are not met, else None.

    flag_values is a mapping of full flag name to value, or a callable that
    resolves one flag name. Unset flags (None) count as off.
    """
    lookup = flag_values if callable(flag_values) else flag_values.get
    flags_off, flags_on = get_required_flags(test, owner)

    enabled = [f for f in flags_off if lookup(f) is True]
    if enabled:
        return f"assumption failed: flag(s) required off are on: {', '.join(enabled)}"

    disabled = [f for f in flags_on if lookup(f) is not True]
    if disabled:
        return f"assumption failed: flag(s) required on are off: {', '.join(disabled)}"

    return None


class FlagChecker:
    """Resolves flags through a device, caching each value for the checker's life."""

    def __init__(self, device):
        self._device = device
        self._cache: dict[str, bool | None] = {}

    def get(self, flag: str) -> bool | None:
        if flag not in self._cache:
            self._cache[flag] = self._device.get_flag(flag)
            logger.debug("Flag %s = %s", flag, self._cache[flag])
        return self._cache[flag]

    def skip_reason(self, test, owner=None) -> str | None:
        return check_flags(test, self.get, owner)
