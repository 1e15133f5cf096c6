"""Tests for users_online.config."""

from users_online.config import UsersOnlineSettings, get_config
from users_online.presence import PresenceTracker


class TestDefaults:
    def test_defaults(self):
        config = UsersOnlineSettings()
        assert config.default_duration == 300
        assert config.cache_prefix == "UserOnline"
        assert config.cache_store is None
        assert config.user_fields == ("id", "name", "email")
        assert config.auto_cleanup is True
        assert config.get("store_backend") == "cache"
        assert config.get("track_auth_events") is True
        assert config.get("redis_key_prefix") == ""

    def test_defaults_not_shared(self):
        first = UsersOnlineSettings()
        first.as_dict()["user_fields"].append("password")
        assert UsersOnlineSettings().user_fields == ("id", "name", "email")

    def test_get_default_for_missing_key(self):
        assert UsersOnlineSettings().get("nope", 7) == 7


class TestOverrides:
    def test_reads_django_settings(self, settings):
        settings.USERS_ONLINE = {
            "default_duration": 600,
            "cache_prefix": "Online",
            "user_fields": ["id", "username"],
        }
        config = get_config()
        assert config.default_duration == 600
        assert config.cache_prefix == "Online"
        assert config.user_fields == ("id", "username")
        # Unset keys keep their defaults
        assert config.auto_cleanup is True

    def test_explicit_none_falls_back(self, settings):
        settings.USERS_ONLINE = {"default_duration": None, "cache_prefix": None}
        config = get_config()
        assert config.default_duration == 300
        assert config.cache_prefix == "UserOnline"

    def test_constructor_overrides(self):
        assert UsersOnlineSettings({"cache_prefix": "X"}).cache_prefix == "X"

    def test_reload_on_setting_change(self, settings):
        before = get_config()
        settings.USERS_ONLINE = {"cache_prefix": "Changed"}
        after = get_config()

        assert after is not before
        assert after.cache_prefix == "Changed"

    def test_unrelated_setting_keeps_config(self, settings):
        before = get_config()
        settings.SESSION_COOKIE_AGE = 60
        assert get_config() is before

    def test_reset(self, settings):
        config = UsersOnlineSettings({"cache_prefix": "Temp"})
        config.reset()
        assert config.cache_prefix == "UserOnline"


class TestTrackerFromSettings:
    def test_tracker_uses_settings(self, settings):
        settings.USERS_ONLINE = {
            "default_duration": 90,
            "cache_prefix": "Staff",
            "user_fields": ["id"],
            "login_duration": 1800,
            "store_backend": "memory",
        }
        tracker = PresenceTracker.from_settings()

        assert tracker.default_duration == 90
        assert tracker.prefix == "Staff"
        assert tracker.user_fields == ("id",)
        assert tracker.login_duration == 1800

    def test_keyword_overrides(self):
        tracker = PresenceTracker.from_settings(prefix="Override")
        assert tracker.prefix == "Override"
