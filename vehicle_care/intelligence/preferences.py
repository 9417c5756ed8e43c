"""Owner notification channel preferences."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

EMAIL = "email"
SMS = "sms"
IN_APP = "in_app"

CHANNELS = (EMAIL, SMS, IN_APP)

# Older clients stored the in-app flag under its camelCase name.
_IN_APP_KEYS = ("in_app", "inApp")


@dataclass(frozen=True)
class NotificationPreferences:
    """Which channels an owner receives reminders on.

    Email and in-app are opt-out: only an explicit ``False`` disables them.
    SMS is opt-in: only an explicit ``True`` enables it.
    """

    email: bool = True
    sms: bool = False
    in_app: bool = True

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "NotificationPreferences":
        if not raw:
            return cls()

        in_app = True
        for key in _IN_APP_KEYS:
            if key in raw:
                in_app = raw[key] is not False
                break

        return cls(
            email=raw.get(EMAIL) is not False,
            sms=raw.get(SMS) is True,
            in_app=in_app,
        )

    def enabled_channels(self) -> frozenset[str]:
        return frozenset(channel for channel, enabled in asdict(self).items() if enabled)

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


def resolve_channels(raw: Mapping[str, Any] | None) -> frozenset[str]:
    """Effective enabled channels for a stored preferences mapping."""
    return NotificationPreferences.from_mapping(raw).enabled_channels()
