"""Plugin Django models."""

from dataclasses import replace

from django.db import models

from .acl import PermissionModel


class ACLUser(models.Model):
    """Desired state of a Redis ACL user.

    Passwords are never stored. ``applied_password_version`` records the
    password version last applied to Redis so that a change to
    ``password_version`` can be detected as a request to rotate the password. It is
    None until the user has been created in or imported from Redis.
    """

    name = models.CharField(max_length=255, unique=True)
    enabled = models.BooleanField(default=True)
    password_version = models.CharField(max_length=255, blank=True)
    applied_password_version = models.CharField(
        max_length=255, null=True, blank=True, default=None, editable=False
    )
    categories = models.JSONField(default=list, blank=True)
    commands = models.JSONField(default=list, blank=True)
    excluded_commands = models.JSONField(default=list, blank=True)
    keys = models.JSONField(default=list, blank=True)
    readonly_keys = models.JSONField(default=list, blank=True)
    writeonly_keys = models.JSONField(default=list, blank=True)
    channels = models.JSONField(default=list, blank=True)
    acl_save = models.BooleanField(default=True)

    def __str__(self) -> str:
        """String representation of the ACLUser."""
        return f"ACLUser(name={self.name})"

    @property
    def is_applied(self) -> bool:
        """Whether the user has been created in or imported from Redis."""
        return self.applied_password_version is not None

    def desired_state(self) -> PermissionModel:
        """The state the user should have in Redis."""
        return PermissionModel(
            name=self.name,
            enabled=self.enabled,
            password_version=self.password_version,
            categories=list(self.categories),
            commands=list(self.commands),
            excluded_commands=list(self.excluded_commands),
            keys=list(self.keys),
            readonly_keys=list(self.readonly_keys),
            writeonly_keys=list(self.writeonly_keys),
            channels=list(self.channels),
            save_on_change=self.acl_save,
        )

    def applied_state(self) -> PermissionModel:
        """The desired state as of the last time it was applied to Redis."""
        return replace(
            self.desired_state(), password_version=self.applied_password_version or ""
        )

    @classmethod
    def from_permission_model(cls, model: PermissionModel) -> "ACLUser":
        """Create an unsaved ACLUser matching an applied PermissionModel."""
        return cls(
            name=model.name,
            enabled=model.enabled,
            password_version=model.password_version,
            applied_password_version=model.password_version,
            categories=model.categories,
            commands=model.commands,
            excluded_commands=model.excluded_commands,
            keys=model.keys,
            readonly_keys=model.readonly_keys,
            writeonly_keys=model.writeonly_keys,
            channels=model.channels,
            acl_save=model.save_on_change,
        )
