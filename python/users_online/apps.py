from django.apps import AppConfig


class UsersOnlineConfig(AppConfig):
    name = "users_online"
    verbose_name = "Users online"

    def ready(self):
        # Import checks module so @register() decorators are executed
        import users_online.checks  # noqa: F401

        from .config import get_config
        from .handlers import connect_auth_signals

        if get_config().get("track_auth_events", True):
            connect_auth_signals()
