"""Tests for notification preference resolution."""

import pytest

from vehicle_care.intelligence.preferences import NotificationPreferences, resolve_channels


class TestDefaults:
    """Email and in-app are opt-out, SMS is opt-in."""

    @pytest.mark.parametrize("raw", [None, {}])
    def test_absent_or_empty(self, raw):
        prefs = NotificationPreferences.from_mapping(raw)
        assert prefs.to_dict() == {"email": True, "sms": False, "in_app": True}

    def test_unrelated_keys_keep_defaults(self):
        assert resolve_channels({"push": True}) == {"email", "in_app"}


class TestExplicitValues:
    def test_sms_needs_explicit_true(self):
        assert "sms" in resolve_channels({"sms": True})
        assert "sms" not in resolve_channels({"sms": "yes"})
        assert "sms" not in resolve_channels({"sms": 1})

    def test_email_only_disabled_by_false(self):
        assert "email" not in resolve_channels({"email": False})
        assert "email" in resolve_channels({"email": None})
        assert "email" in resolve_channels({"email": 0})

    def test_in_app_disabled(self):
        assert resolve_channels({"in_app": False}) == {"email"}

    def test_legacy_camel_case_key(self):
        assert resolve_channels({"inApp": False}) == {"email"}

    def test_everything_off(self):
        assert resolve_channels({"email": False, "sms": False, "in_app": False}) == frozenset()
