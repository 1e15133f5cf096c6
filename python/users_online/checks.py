"""
Django system checks for users_online.

Registers checks with Django's check framework that also run via
``python manage.py check``. IDs:

- users_online.E001 -- default_duration is not a positive integer
- users_online.E002 -- cache_store names an unknown cache alias
- users_online.E003 -- user_fields is empty or malformed
- users_online.E004 -- unknown store_backend
- users_online.E005 -- login_duration is set but not a positive integer
- users_online.W001 -- presence cache is a DummyCache
- users_online.I001 -- presence cache is per-process (LocMemCache)
- users_online.W002 -- presence store reports itself unhealthy (deploy only)
"""

from django.core.cache import DEFAULT_CACHE_ALIAS
from django.core.checks import Error, Info, Warning, register

from .backends.registry import STORE_BACKENDS


class _FixHintMixin:
    """Mixin that adds fix_hint to check results."""

    def __init__(self, *args, fix_hint="", **kwargs):
        super().__init__(*args, **kwargs)
        self.fix_hint = fix_hint


class UsersOnlineCheckError(_FixHintMixin, Error):
    pass


class UsersOnlineCheckWarning(_FixHintMixin, Warning):
    pass


class UsersOnlineCheckInfo(_FixHintMixin, Info):
    pass


def _check_cache_backend(alias, caches_setting, errors):
    backend = caches_setting.get(alias, {}).get("BACKEND", "")

    if backend.endswith("DummyCache"):
        errors.append(
            UsersOnlineCheckWarning(
                f"Presence cache '{alias}' uses DummyCache; no user will ever appear online.",
                hint="Point USERS_ONLINE['cache_store'] at a real cache.",
                id="users_online.W001",
                fix_hint="Add a Redis or Memcached entry to CACHES and set USERS_ONLINE['cache_store'] to it.",
            )
        )
    elif backend.endswith("LocMemCache"):
        errors.append(
            UsersOnlineCheckInfo(
                f"Presence cache '{alias}' is a LocMemCache; each process sees only its own logins.",
                hint="Use a shared cache when running more than one worker.",
                id="users_online.I001",
            )
        )


@register("users_online")
def check_configuration(app_configs, **kwargs):
    """Validate the USERS_ONLINE setting."""
    from django.conf import settings

    from .config import UsersOnlineSettings

    config = UsersOnlineSettings()
    errors = []

    # E001 -- default_duration
    duration = config.get("default_duration")
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        errors.append(
            UsersOnlineCheckError(
                f"USERS_ONLINE['default_duration'] must be a positive integer, got {duration!r}.",
                hint="The default is 300 seconds (5 minutes).",
                id="users_online.E001",
                fix_hint="Set `'default_duration': 300` in USERS_ONLINE.",
            )
        )

    # E005 -- login_duration
    login = config.get("login_duration")
    if login is not None and (isinstance(login, bool) or not isinstance(login, int) or login <= 0):
        errors.append(
            UsersOnlineCheckError(
                f"USERS_ONLINE['login_duration'] must be a positive integer or None, got {login!r}.",
                hint="None keeps a login online for as long as its session lasts.",
                id="users_online.E005",
                fix_hint="Remove `'login_duration'` from USERS_ONLINE or set it to a number of seconds.",
            )
        )

    # E003 -- user_fields
    fields = config.get("user_fields")
    if (
        not isinstance(fields, (list, tuple))
        or not fields
        or not all(isinstance(name, str) and name for name in fields)
    ):
        errors.append(
            UsersOnlineCheckError(
                "USERS_ONLINE['user_fields'] must be a non-empty list of attribute names.",
                hint="Only these attributes are copied into the cached snapshot.",
                id="users_online.E003",
                fix_hint="Set `'user_fields': ['id', 'name', 'email']` in USERS_ONLINE.",
            )
        )

    # E004 -- store_backend
    backend_type = config.get("store_backend", "cache")
    if backend_type not in STORE_BACKENDS:
        errors.append(
            UsersOnlineCheckError(
                f"USERS_ONLINE['store_backend'] is {backend_type!r}.",
                hint=f"Choose one of: {', '.join(STORE_BACKENDS)}.",
                id="users_online.E004",
            )
        )
        return errors

    if backend_type != "cache":
        return errors

    # E002 -- cache alias
    caches_setting = getattr(settings, "CACHES", {}) or {}
    alias = config.cache_store or DEFAULT_CACHE_ALIAS
    if alias not in caches_setting:
        errors.append(
            UsersOnlineCheckError(
                f"USERS_ONLINE['cache_store'] refers to cache '{alias}', which is not in CACHES.",
                hint=f"Known caches: {', '.join(caches_setting) or '(none)'}.",
                id="users_online.E002",
                fix_hint=f"Add a '{alias}' entry to CACHES or change USERS_ONLINE['cache_store'].",
            )
        )
        return errors

    _check_cache_backend(alias, caches_setting, errors)
    return errors


@register("users_online", deploy=True)
def check_presence_store(app_configs, **kwargs):
    """Ask the configured presence store whether it can be reached."""
    from django.core.exceptions import ImproperlyConfigured

    from .backends.registry import get_presence_store

    try:
        store = get_presence_store()
    except ImproperlyConfigured:
        # Reported by E004
        return []
    except ImportError as e:
        return [
            UsersOnlineCheckWarning(
                f"The presence store could not be built: {e}",
                hint="Install the optional dependency for USERS_ONLINE['store_backend'].",
                id="users_online.W002",
                fix_hint="pip install django-users-online[redis]",
            )
        ]

    health = store.health_check()
    if health.get("status") == "healthy":
        return []
    return [
        UsersOnlineCheckWarning(
            f"Presence store {health.get('backend', type(store).__name__)!r} is unhealthy: "
            f"{health.get('error', 'no detail')}.",
            hint="Until it recovers every user reads as offline.",
            id="users_online.W002",
        )
    ]
