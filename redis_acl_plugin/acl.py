"""Data structures for representing Redis ACL users."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class MalformedDescriptorError(Exception):
    """The reply to ACL GETUSER does not have the expected shape."""


@dataclass
class PermissionModel:
    """Desired or observed state of a single Redis ACL user.

    Args:
        name: Name of the ACL user, immutable once created.
        enabled: Whether the user is allowed to authenticate.
        password_hashes: SHA256 hex digests of the accepted passwords.
        password_version: Opaque value, changing it requests a password rotation.
            It is never sent to Redis.
        categories: Command categories the user may run e.g. "read" or "all".
        commands: Individual commands the user may run.
        excluded_commands: Individual commands the user may not run.
        keys: Key patterns with full access.
        readonly_keys: Key patterns with read access only.
        writeonly_keys: Key patterns with write access only.
        channels: Pub/Sub channel patterns the user may access.
        save_on_change: Whether to persist the ACL table after each mutation.
    """

    name: str
    enabled: bool = True
    password_hashes: list[str] = field(default_factory=list)
    password_version: str = ""
    categories: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    excluded_commands: list[str] = field(default_factory=list)
    keys: list[str] = field(default_factory=list)
    readonly_keys: list[str] = field(default_factory=list)
    writeonly_keys: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    save_on_change: bool = True


def _as_str(value: Any) -> str | None:
    if isinstance(value, bytes):
        return value.decode()
    if isinstance(value, str):
        return value
    return None


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list | tuple):
        return []
    return [s for s in map(_as_str, value) if s is not None]


@dataclass
class ACLDescriptor:
    """Raw ACL rules for a user as reported by ACL GETUSER.

    Args:
        flags: User state flags e.g. "on", "allkeys".
        commands: Space separated category, command and exclusion rules.
        keys: Space separated key pattern rules.
        channels: Space separated channel pattern rules.
        passwords: Password hashes accepted for the user.
    """

    flags: list[str] = field(default_factory=list)
    commands: str = ""
    keys: str = ""
    channels: str = ""
    passwords: list[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, response: Any) -> "ACLDescriptor":
        """Build a descriptor from an ACL GETUSER reply.

        RESP3 connections return a mapping, RESP2 connections a flat list of
        alternating field names and values. Missing or unexpectedly typed fields
        are left empty.

        Args:
            response: The reply as returned by redis-py.

        Raises:
            MalformedDescriptorError: If the reply is neither a mapping nor a list
                of field/value pairs.
        """
        if isinstance(response, Mapping):
            items = list(response.items())
        elif isinstance(response, list | tuple):
            if len(response) % 2:
                raise MalformedDescriptorError(
                    f"Expected field/value pairs, got {len(response)} elements"
                )
            items = list(zip(response[::2], response[1::2]))
        else:
            raise MalformedDescriptorError(
                f"Unexpected ACL GETUSER reply of type {type(response).__name__}"
            )

        data = {}
        for key, value in items:
            if (name := _as_str(key)) is None:
                raise MalformedDescriptorError(f"Unexpected field name {key!r}")
            data[name] = value

        return cls(
            flags=_as_str_list(data.get("flags")),
            commands=_as_str(data.get("commands")) or "",
            keys=_as_str(data.get("keys")) or "",
            channels=_as_str(data.get("channels")) or "",
            passwords=_as_str_list(data.get("passwords")),
        )
