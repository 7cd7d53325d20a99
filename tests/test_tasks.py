from dataclasses import replace

import pytest

from redis_acl_plugin.acl import ACLDescriptor
from redis_acl_plugin.models import ACLUser
from redis_acl_plugin.reconcile import (
    ACLUserAlreadyExistsError,
    MissingCredentialError,
)
from redis_acl_plugin.redis_client import (
    ACLSetUserError,
    ACLUserNotFoundError,
    RedisConnectionConfig,
)
from redis_acl_plugin.rules import hash_password
from redis_acl_plugin.tasks import (
    apply_acl_user,
    check_acl_consistency,
    delete_acl_user,
    get_reconciler,
)

PASSWORD = "newpassword"


def test_get_reconciler():
    """Test the reconciler is configured from settings."""
    reconciler = get_reconciler()
    assert reconciler.client.config == RedisConnectionConfig.from_settings()


def test_apply_acl_user_creates(tasks_client_mock, acl_user):
    """Test a previously applied user missing from Redis is created again."""
    tasks_client_mock.get_user.side_effect = ACLUserNotFoundError("not found")

    applied = apply_acl_user(acl_user.name, PASSWORD)

    assert applied.password_hashes == [hash_password(PASSWORD)]
    tasks_client_mock.set_user.assert_called_once()
    acl_user.refresh_from_db()
    assert acl_user.applied_password_version == "2"


def test_apply_acl_user_new_user_creates(tasks_client_mock, acl_user):
    """Test a user never applied before is created."""
    ACLUser.objects.filter(pk=acl_user.pk).update(applied_password_version=None)
    tasks_client_mock.get_user.side_effect = ACLUserNotFoundError("not found")

    applied = apply_acl_user(acl_user.name, PASSWORD)

    assert applied.password_hashes == [hash_password(PASSWORD)]
    tasks_client_mock.set_user.assert_called_once()
    acl_user.refresh_from_db()
    assert acl_user.applied_password_version == "2"


def test_apply_acl_user_new_user_exists_in_redis(tasks_client_mock, acl_user):
    """Test a user never applied before does not take over an existing Redis user."""
    ACLUser.objects.filter(pk=acl_user.pk).update(applied_password_version=None)
    tasks_client_mock.get_user.return_value = ACLDescriptor(
        flags=["on"], commands="+@all", passwords=["adminhash"]
    )

    with pytest.raises(ACLUserAlreadyExistsError, match="already exists"):
        apply_acl_user(acl_user.name, PASSWORD)

    tasks_client_mock.set_user.assert_not_called()
    tasks_client_mock.save_config.assert_not_called()
    acl_user.refresh_from_db()
    assert not acl_user.is_applied


def test_apply_acl_user_create_requires_password(tasks_client_mock, acl_user):
    """Test creating without a password fails and records nothing."""
    tasks_client_mock.get_user.side_effect = ACLUserNotFoundError("not found")

    with pytest.raises(MissingCredentialError):
        apply_acl_user(acl_user.name)

    tasks_client_mock.set_user.assert_not_called()
    acl_user.refresh_from_db()
    assert acl_user.applied_password_version == "1"


def test_apply_acl_user_rotates(tasks_client_mock, acl_user, acl_getuser_reply):
    """Test an existing user has its password rotated on a version change."""
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        acl_getuser_reply
    )

    applied = apply_acl_user(acl_user.name, PASSWORD)

    assert applied.password_hashes == [hash_password(PASSWORD)]
    acl_user.refresh_from_db()
    assert acl_user.applied_password_version == "2"


def test_apply_acl_user_no_rotation(tasks_client_mock, acl_user, acl_getuser_reply):
    """Test an existing user keeps its passwords when the version is unchanged."""
    ACLUser.objects.filter(pk=acl_user.pk).update(applied_password_version="2")
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        acl_getuser_reply
    )

    applied = apply_acl_user(acl_user.name, PASSWORD)

    assert applied.password_hashes == ["h0"]


def test_apply_acl_user_error(tasks_client_mock, acl_user, acl_getuser_reply):
    """Test the applied version is not recorded if Redis rejects the rules."""
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        acl_getuser_reply
    )
    tasks_client_mock.set_user.side_effect = ACLSetUserError("bad rule")

    with pytest.raises(ACLSetUserError):
        apply_acl_user(acl_user.name, PASSWORD)

    acl_user.refresh_from_db()
    assert acl_user.applied_password_version == "1"


@pytest.mark.django_db
def test_apply_acl_user_unknown(tasks_client_mock):
    """Test applying a user without a database entry."""
    with pytest.raises(ACLUser.DoesNotExist):
        apply_acl_user("unknown")


def test_delete_acl_user(tasks_client_mock):
    """Test delete_acl_user."""
    delete_acl_user("svc", save_on_change=True)
    tasks_client_mock.delete_user.assert_called_once_with("svc")
    tasks_client_mock.save_config.assert_called_once_with()


def test_check_acl_consistency(tasks_client_mock, acl_user, acl_getuser_reply):
    """Test a user matching Redis is not reported."""
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        acl_getuser_reply
    )
    assert check_acl_consistency() == {}


def test_check_acl_consistency_order_insensitive(
    tasks_client_mock, acl_user, acl_getuser_reply
):
    """Test the order of rules reported by Redis does not matter."""
    acl_getuser_reply["commands"] = "-flushall +config|get +@write +@read"
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        acl_getuser_reply
    )
    assert check_acl_consistency() == {}


def test_check_acl_consistency_drift(tasks_client_mock, acl_user, acl_getuser_reply):
    """Test differing fields are reported."""
    acl_getuser_reply.update(flags=["off"], keys="~app:* ~extra:* %R~cache:*")
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        acl_getuser_reply
    )

    assert check_acl_consistency() == {"svc": ["enabled", "keys", "writeonly_keys"]}


def test_check_acl_consistency_missing(tasks_client_mock, acl_user):
    """Test users missing from Redis are reported."""
    tasks_client_mock.get_user.side_effect = ACLUserNotFoundError("not found")
    assert check_acl_consistency() == {"svc": ["missing"]}


def test_check_acl_consistency_all_category(tasks_client_mock, acl_user):
    """Test commands suppressed by the all category are not reported."""
    acl_user.categories = ["all"]
    acl_user.save()
    tasks_client_mock.get_user.return_value = ACLDescriptor.from_response(
        dict(
            flags=["on"],
            commands="+@all",
            keys="~app:* %R~cache:* %W~logs:*",
            channels="&ev:*",
            passwords=["h0"],
        )
    )
    assert check_acl_consistency() == {}


@pytest.mark.django_db
def test_check_acl_consistency_no_users(tasks_client_mock):
    """Test nothing is checked without users."""
    assert check_acl_consistency() == {}
    tasks_client_mock.get_user.assert_not_called()


def test_apply_then_check(tasks_client_mock, acl_user, permission_model):
    """Test that a user reports as consistent after being created."""
    tasks_client_mock.get_user.side_effect = ACLUserNotFoundError("not found")
    applied = apply_acl_user(acl_user.name, PASSWORD)
    rules = tasks_client_mock.set_user.call_args.args[1]

    tasks_client_mock.get_user.side_effect = None
    tasks_client_mock.get_user.return_value = ACLDescriptor(
        flags=["on"],
        commands=" ".join(r for r in rules if r[0] in "+-"),
        keys=" ".join(r for r in rules if r[0] in "~%"),
        channels=" ".join(r for r in rules if r[0] == "&"),
        passwords=applied.password_hashes,
    )
    assert check_acl_consistency() == {}
    assert applied == replace(
        permission_model,
        password_version="2",
        password_hashes=[hash_password(PASSWORD)],
    )
