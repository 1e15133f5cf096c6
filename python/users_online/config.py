"""
Configuration system for users_online

Values come from the ``USERS_ONLINE`` dict in Django settings, layered over
the defaults below. Nothing here talks to a store; the registries in
``users_online.backends.registry`` read it when they build their objects.
"""

import copy
from typing import Any, Dict, Optional

from django.test.signals import setting_changed

SETTINGS_NAME = "USERS_ONLINE"


class UsersOnlineSettings:
    """
    Central configuration for presence tracking.

    Usage:
        # In settings.py
        USERS_ONLINE = {
            'default_duration': 600,
            'cache_store': 'presence',
            'user_fields': ['id', 'username', 'email'],
        }

        # Or programmatically
        from users_online.config import get_config
        get_config().get('cache_prefix')  # 'UserOnline'
    """

    # Default configuration
    _defaults = {
        "default_duration": 300,  # seconds
        "cache_prefix": "UserOnline",
        "cache_store": None,  # Django cache alias; None = "default"
        "user_fields": ["id", "name", "email"],
        "auto_cleanup": True,  # Advisory only, the store handles expiry
        "store_backend": "cache",  # Options: 'cache', 'memory', 'redis'
        "redis_url": "redis://localhost:6379/0",
        "redis_key_prefix": "",  # Prepended to every Redis key
        "login_duration": None,  # None = session expiry age
        "track_auth_events": True,
        "universe": None,  # Dotted path to a callable returning all users
    }

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        self._config = copy.deepcopy(self._defaults)
        self._load_from_settings()
        if overrides:
            self._config.update(overrides)

    def _load_from_settings(self):
        """Load configuration from Django settings if available"""
        from django.conf import settings

        if settings.configured:
            self._config.update(getattr(settings, SETTINGS_NAME, None) or {})

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Returns ``default`` when the key is missing or explicitly ``None``.
        """
        value = self._config.get(key)
        return value if value is not None else default

    @property
    def default_duration(self) -> int:
        return self.get("default_duration", self._defaults["default_duration"])

    @property
    def cache_prefix(self) -> str:
        return self.get("cache_prefix", self._defaults["cache_prefix"])

    @property
    def cache_store(self) -> Optional[str]:
        return self.get("cache_store")

    @property
    def user_fields(self):
        return tuple(self.get("user_fields", self._defaults["user_fields"]))

    @property
    def auto_cleanup(self) -> bool:
        return bool(self.get("auto_cleanup", True))

    def reset(self):
        """Reset configuration to defaults"""
        self._config = copy.deepcopy(self._defaults)
        self._load_from_settings()

    def as_dict(self) -> Dict[str, Any]:
        """Get the entire configuration as a dictionary"""
        return self._config.copy()


_config: Optional[UsersOnlineSettings] = None


def get_config() -> UsersOnlineSettings:
    """Get the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = UsersOnlineSettings()
    return _config


def reload_config(**kwargs):
    """Drop cached configuration when USERS_ONLINE changes (e.g. override_settings)."""
    global _config
    if kwargs.get("setting", SETTINGS_NAME) != SETTINGS_NAME:
        return
    _config = None

    from .backends.registry import reset_presence_store, reset_presence_tracker

    reset_presence_store()
    reset_presence_tracker()


setting_changed.connect(reload_config)
