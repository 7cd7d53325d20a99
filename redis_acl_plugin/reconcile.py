"""Reconciliation of desired ACL user state with a Redis server."""

import logging
from dataclasses import replace

from .acl import PermissionModel
from .redis_client import ACLUserNotFoundError, RedisACLClient
from .rules import (
    ALL_CATEGORY,
    DecodedACL,
    build_acl_rules,
    decode_descriptor,
    hash_password,
)

logger = logging.getLogger(__name__)


class ACLUserAlreadyExistsError(Exception):
    """An ACL user being created is already present in Redis."""


class MissingCredentialError(Exception):
    """No password was provided for an ACL user that requires one."""


class ACLUserReconciler:
    """Drive the lifecycle of ACL users in Redis from PermissionModels.

    None of the operations retry. Apart from a user not being found, every error
    from the client propagates to the caller. A failure to save the ACL table after
    a successful change does not undo the change.

    Args:
        client: Client for the Redis server holding the users.
    """

    def __init__(self, client: RedisACLClient) -> None:
        """Initialise the reconciler with a Redis client."""
        self.client = client

    def _get_live_user(self, name: str) -> DecodedACL | None:
        try:
            descriptor = self.client.get_user(name)
        except ACLUserNotFoundError:
            return None

        decoded = decode_descriptor(descriptor)
        # -@all is the baseline set by reset, so only other denials are lost.
        denied = [
            category
            for category in decoded.command_rules.denied_categories
            if category != ALL_CATEGORY
        ]
        if denied:
            logger.warning(
                f"ACL user '{name}' has denied categories {denied} which are not "
                "managed and will be removed on the next update."
            )
        return decoded

    def _set_user(self, model: PermissionModel, password_hashes: list[str]) -> None:
        self.client.set_user(model.name, build_acl_rules(model, password_hashes))
        if model.save_on_change:
            self.client.save_config()

    def create(self, desired: PermissionModel, password: str | None) -> PermissionModel:
        """Create a new ACL user.

        Args:
            desired: The state the user should be created with.
            password: Plaintext password for the user.

        Raises:
            MissingCredentialError: If password is empty.
            ACLUserAlreadyExistsError: If a user with the same name already exists.

        Returns:
            The desired state with the applied password hash.
        """
        if not password:
            raise MissingCredentialError(
                f"A password is required to create ACL user '{desired.name}'"
            )
        if self._get_live_user(desired.name) is not None:
            raise ACLUserAlreadyExistsError(
                f"ACL user '{desired.name}' already exists, consider importing it"
            )

        password_hashes = [hash_password(password)]
        logger.info(f"Creating ACL user '{desired.name}'.")
        self._set_user(desired, password_hashes)
        return replace(desired, password_hashes=password_hashes)

    def read(self, state: PermissionModel) -> PermissionModel | None:
        """Refresh a user's state from Redis.

        Args:
            state: The last known state of the user. Its name, password version and
                save setting are carried over into the result.

        Returns:
            The observed state of the user or None if it no longer exists.
        """
        if (decoded := self._get_live_user(state.name)) is None:
            logger.info(f"ACL user '{state.name}' not found in Redis.")
            return None

        return replace(
            state,
            enabled=decoded.enabled,
            password_hashes=decoded.password_hashes,
            categories=decoded.command_rules.categories,
            commands=decoded.command_rules.commands,
            excluded_commands=decoded.command_rules.excluded_commands,
            keys=decoded.key_rules.keys,
            readonly_keys=decoded.key_rules.readonly_keys,
            writeonly_keys=decoded.key_rules.writeonly_keys,
            channels=decoded.channels,
        )

    def update(
        self,
        desired: PermissionModel,
        state: PermissionModel,
        password: str | None = None,
    ) -> PermissionModel | None:
        """Replace the rules of an existing user with the desired state.

        Passwords are only changed when the password version differs from the one
        previously applied and a new password is given. The new password then
        replaces all existing ones. Otherwise the password hashes currently set in
        Redis are kept.

        Args:
            desired: The state the user should have.
            state: The previously applied state of the user.
            password: Plaintext password to rotate to.

        Raises:
            ValueError: If desired and state are for different users.

        Returns:
            The applied state or None if the user no longer exists.
        """
        if desired.name != state.name:
            raise ValueError(
                f"Cannot update ACL user '{state.name}' to '{desired.name}', "
                "names are immutable"
            )
        if (decoded := self._get_live_user(desired.name)) is None:
            logger.info(f"ACL user '{desired.name}' not found in Redis.")
            return None

        password_hashes = decoded.password_hashes
        if desired.password_version != state.password_version and password:
            logger.info(f"Rotating password of ACL user '{desired.name}'.")
            password_hashes = [hash_password(password)]

        logger.info(f"Updating ACL user '{desired.name}'.")
        self._set_user(desired, password_hashes)
        return replace(desired, password_hashes=password_hashes)

    def delete(self, name: str, save_on_change: bool) -> None:
        """Delete an ACL user.

        Args:
            name: Name of the ACL user.
            save_on_change: Whether to save the ACL table afterwards.
        """
        self.client.delete_user(name)
        if save_on_change:
            self.client.save_config()

    def import_user(self, name: str) -> PermissionModel | None:
        """Get the state of an existing user that is not yet managed.

        Returns:
            The observed state of the user or None if it does not exist.
        """
        return self.read(PermissionModel(name=name))
