"""
Auth signal receivers.

Connected by ``UsersOnlineConfig.ready()`` when
USERS_ONLINE['track_auth_events'] is on (the default):

    user_logged_in   -> PresenceTracker.on_authenticated
    user_logged_out  -> PresenceTracker.on_deauthenticated
"""

import logging

from django.conf import settings
from django.contrib.auth.signals import user_logged_in, user_logged_out

from .backends.registry import get_presence_tracker
from .exceptions import InvalidDuration
from .presence import validate_duration

logger = logging.getLogger(__name__)

LOGIN_DISPATCH_UID = "users_online.mark_user_online"
LOGOUT_DISPATCH_UID = "users_online.clear_user_online"


def _is_trackable(user) -> bool:
    return user is not None and not getattr(user, "is_anonymous", False)


def _usable(seconds) -> bool:
    try:
        validate_duration(seconds)
    except InvalidDuration:
        return False
    return True


def login_duration(tracker, request=None) -> int:
    """
    TTL for a fresh login.

    USERS_ONLINE['login_duration'] wins; otherwise the login lasts as long as
    the session does. A value that is not a positive duration (a zero
    setting, an already expired session) falls back to ``default_duration``
    so the login itself never fails.
    """
    if tracker.login_duration is not None:
        if _usable(tracker.login_duration):
            return tracker.login_duration
        logger.warning(
            "Ignoring USERS_ONLINE['login_duration'] %r, using default_duration",
            tracker.login_duration,
        )
        return tracker.default_duration
    session = getattr(request, "session", None)
    if session is not None and hasattr(session, "get_expiry_age"):
        age = session.get_expiry_age()
        if _usable(age):
            return age
        logger.debug("Session expiry age %r unusable as presence TTL", age)
        return tracker.default_duration
    return settings.SESSION_COOKIE_AGE


def mark_user_online(sender, request=None, user=None, **kwargs):
    if not _is_trackable(user):
        return
    tracker = get_presence_tracker()
    tracker.on_authenticated(user, login_duration(tracker, request))


def clear_user_online(sender, request=None, user=None, **kwargs):
    # Logging out an anonymous session sends user=None
    if not _is_trackable(user):
        return
    get_presence_tracker().on_deauthenticated(user)


def connect_auth_signals():
    user_logged_in.connect(mark_user_online, dispatch_uid=LOGIN_DISPATCH_UID)
    user_logged_out.connect(clear_user_online, dispatch_uid=LOGOUT_DISPATCH_UID)
    logger.debug("users_online connected to auth login/logout signals")


def disconnect_auth_signals():
    user_logged_in.disconnect(dispatch_uid=LOGIN_DISPATCH_UID)
    user_logged_out.disconnect(dispatch_uid=LOGOUT_DISPATCH_UID)
