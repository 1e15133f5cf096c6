"""
Pytest configuration and fixtures for users_online tests.
"""

import pytest

START = 1_700_000_000.0


def pytest_configure(config):
    # Setup Django settings before any users_online module is imported
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            SECRET_KEY="test-secret-key-for-users-online-tests",
            DEBUG=True,
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME": ":memory:",
                }
            },
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
                "django.contrib.auth",
                "django.contrib.sessions",
                "users_online",
            ],
            MIDDLEWARE=[
                "django.contrib.sessions.middleware.SessionMiddleware",
                "django.contrib.auth.middleware.AuthenticationMiddleware",
            ],
            CACHES={
                "default": {
                    "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
                    "LOCATION": "users-online-tests",
                },
                "presence": {
                    "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
                    "LOCATION": "users-online-presence",
                },
            },
            PASSWORD_HASHERS=["django.contrib.auth.hashers.MD5PasswordHasher"],
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            USE_TZ=True,
        )


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Member:
    """Plain entity with more attributes than a snapshot should keep."""

    def __init__(self, id, name=None, email=None, password="hunter2"):
        self.id = id
        self.name = name if name is not None else f"member-{id}"
        self.email = email if email is not None else f"member{id}@example.com"
        self.password = password

    def __repr__(self):
        return f"<Member {self.id}>"


@pytest.fixture(autouse=True)
def clean_presence_state():
    """Clear caches and registries around each test."""
    from django.core.cache import caches

    from users_online.backends.registry import reset_presence_store, reset_presence_tracker

    def _clean():
        reset_presence_store()
        reset_presence_tracker()
        for alias in ("default", "presence"):
            caches[alias].clear()

    _clean()
    yield
    _clean()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """In-memory store sharing the fake clock."""
    from users_online.backends.memory import InMemoryPresenceStore

    return InMemoryPresenceStore(clock=clock)


@pytest.fixture
def tracker(store, clock):
    from users_online.presence import PresenceTracker

    return PresenceTracker(store, clock=clock)


@pytest.fixture
def members():
    return [Member(1, "Ada"), Member(2, "Bob"), Member(3, "Cy")]
