"""Plugin tasks."""

import logging

from django_q.tasks import async_task

from .acl import PermissionModel
from .models import ACLUser
from .reconcile import ACLUserReconciler
from .redis_client import RedisACLClient, RedisConnectionConfig
from .rules import ALL_CATEGORY

COMPARED_FIELDS = (
    "enabled",
    "categories",
    "commands",
    "excluded_commands",
    "keys",
    "readonly_keys",
    "writeonly_keys",
    "channels",
)
"""PermissionModel fields that can be compared between the database and Redis."""


def get_reconciler() -> ACLUserReconciler:
    """Return a reconciler for the Redis server configured in settings."""
    return ACLUserReconciler(RedisACLClient(RedisConnectionConfig.from_settings()))


def apply_acl_user(name: str, password: str | None = None) -> PermissionModel:
    """Bring an ACL user in Redis in line with its ACLUser entry.

    An ACLUser that has never been applied is created, which requires a password
    and fails if a user of the same name already exists in Redis. Such users must
    be imported instead. For an ACLUser applied before, the rules are replaced and
    the password is rotated if the password version has changed since it was last
    applied. It is created again if it has since disappeared from Redis.

    Note that this function interacts with external systems.

    Args:
        name: Name of the ACLUser to apply.
        password: Plaintext password for the user.

    Returns:
        The state applied to Redis.
    """
    logger = logging.getLogger("django-q")

    acl_user = ACLUser.objects.get(name=name)
    reconciler = get_reconciler()
    desired = acl_user.desired_state()

    if not acl_user.is_applied:
        logger.info(f"Creating ACL user {name} in Redis.")
        applied = reconciler.create(desired, password)
    elif (
        applied := reconciler.update(desired, acl_user.applied_state(), password)
    ) is None:
        logger.info(f"ACL user {name} not present in Redis, creating it.")
        applied = reconciler.create(desired, password)

    ACLUser.objects.filter(pk=acl_user.pk).update(
        applied_password_version=applied.password_version
    )
    return applied


def delete_acl_user(name: str, save_on_change: bool) -> None:
    """Delete an ACL user from Redis."""
    logger = logging.getLogger("django-q")
    logger.info(f"Deleting ACL user {name} from Redis.")
    get_reconciler().delete(name, save_on_change)


def delete_acl_user_in_background(name: str, save_on_change: bool) -> str:
    """Queue deletion of an ACL user from Redis as a django-q task."""
    return async_task(delete_acl_user, name, save_on_change)


def _effective_permissions(model: PermissionModel) -> dict[str, object]:
    values = {
        field_name: getattr(model, field_name)
        for field_name in COMPARED_FIELDS
        if field_name != "enabled"
    }
    if ALL_CATEGORY in model.categories:
        values.update(categories=[ALL_CATEGORY], commands=[], excluded_commands=[])
    return {
        "enabled": model.enabled,
        **{key: sorted(set(value)) for key, value in values.items()},
    }


def check_acl_consistency() -> dict[str, list[str]]:
    """Check that the ACL users in Redis match the database.

    Returns:
        A mapping of user names to the differing fields for every user that does
        not match. A user absent from Redis is reported as ``["missing"]``.
    """
    logger = logging.getLogger("django-q")
    reconciler = get_reconciler()

    discrepancies = {}
    for acl_user in ACLUser.objects.order_by("name"):
        desired = acl_user.desired_state()
        if (observed := reconciler.read(desired)) is None:
            logger.warning(f"ACL user {acl_user.name} is missing from Redis.")
            discrepancies[acl_user.name] = ["missing"]
            continue

        expected = _effective_permissions(desired)
        actual = _effective_permissions(observed)
        differing = [key for key in COMPARED_FIELDS if expected[key] != actual[key]]
        if differing:
            logger.warning(
                f"ACL user {acl_user.name} differs from Redis in "
                f"{', '.join(differing)}."
            )
            discrepancies[acl_user.name] = differing
    return discrepancies
