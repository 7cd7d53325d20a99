"""Pytest configuration."""

from unittest.mock import Mock

import pytest
from django.conf import settings

from redis_acl_plugin.acl import PermissionModel
from redis_acl_plugin.redis_client import RedisACLClient


def pytest_configure():
    """Configure Django settings for standalone test suite execution."""
    from redis_acl_plugin import settings as plugin_settings

    settings.configure(
        DEBUG=True,
        DATABASES={
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
            }
        },
        INSTALLED_APPS=[
            "django.contrib.auth",
            "django.contrib.contenttypes",
            "django.contrib.admin",
            "redis_acl_plugin",
            "django_q",
        ],
        # the admin is only used for model registration, not served
        SILENCED_SYSTEM_CHECKS=[
            "admin.E403",
            "admin.E406",
            "admin.E408",
            "admin.E409",
            "admin.E410",
        ],
        SECRET_KEY="123",
        Q_CLUSTER={"sync": True},
        **{
            key: getattr(plugin_settings, key)
            for key in dir(plugin_settings)
            if key.isupper() and key != "ENV"
        }
        | dict(
            REDIS_ACL_ADDRESS="localhost:6379",
            REDIS_ACL_USERNAME="admin",
            REDIS_ACL_PASSWORD="adminpassword",
            REDIS_ACL_ENABLED=True,
        ),  # override settings loaded by env var for tests
    )


@pytest.fixture
def permission_model():
    """A PermissionModel using every kind of rule."""
    return PermissionModel(
        name="svc",
        enabled=True,
        password_version="1",
        categories=["read", "write"],
        commands=["config|get"],
        excluded_commands=["flushall"],
        keys=["app:*"],
        readonly_keys=["cache:*"],
        writeonly_keys=["logs:*"],
        channels=["ev:*"],
        save_on_change=True,
    )


@pytest.fixture
def acl_user(db, permission_model):
    """An ACLUser matching permission_model with a pending password rotation."""
    from redis_acl_plugin.models import ACLUser

    return ACLUser.objects.create(
        name=permission_model.name,
        password_version="2",
        applied_password_version="1",
        categories=permission_model.categories,
        commands=permission_model.commands,
        excluded_commands=permission_model.excluded_commands,
        keys=permission_model.keys,
        readonly_keys=permission_model.readonly_keys,
        writeonly_keys=permission_model.writeonly_keys,
        channels=permission_model.channels,
    )


@pytest.fixture
def acl_getuser_reply():
    """A RESP3 style ACL GETUSER reply matching the permission_model fixture."""
    return {
        "flags": ["on", "sanitize-payload"],
        "passwords": ["h0"],
        "commands": "-@all +@read +@write +config|get -flushall",
        "keys": "~app:* %R~cache:* %W~logs:*",
        "channels": "&ev:*",
        "selectors": [],
    }


@pytest.fixture
def redis_client_mock():
    """A mock of RedisACLClient."""
    return Mock(spec=RedisACLClient)


@pytest.fixture
def tasks_client_mock(mocker, redis_client_mock):
    """Make the reconciler used by tasks talk to a mock client."""
    mocker.patch(
        "redis_acl_plugin.tasks.RedisACLClient", return_value=redis_client_mock
    )
    return redis_client_mock


@pytest.fixture
def redis_connection_mock(mocker):
    """Replace the redis-py client used by RedisACLClient."""
    mock = mocker.patch("redis_acl_plugin.redis_client.Redis")
    connection = mock.return_value.__enter__.return_value
    connection.execute_command.return_value = "OK"
    return mock


@pytest.fixture(autouse=True)
def block_redis_connections(mocker):
    """Backstop that raises an error if an un-mocked Redis connection is attempted."""

    def f(*args, **kwargs):
        raise RuntimeError("Un-mocked Redis connection.")

    return mocker.patch("redis.connection.Connection.connect", side_effect=f)
