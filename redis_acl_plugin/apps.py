"""Django app configuration.

This is part of the boilerplate needed for a Django app.
"""

import django_stubs_ext
from django.apps import AppConfig


class RedisACLPluginConfig(AppConfig):
    """Plugin app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "redis_acl_plugin"

    def ready(self) -> None:
        """Wire up signal handlers for app."""
        from django.conf import settings

        from . import signals  # noqa: F401
        from .redis_client import validate_redis_address

        django_stubs_ext.monkeypatch()

        # Ensure REDIS_ACL_ADDRESS setting is valid
        # do it here to avoid circular import issues
        if settings.REDIS_ACL_ENABLED:
            validate_redis_address(settings.REDIS_ACL_ADDRESS)
