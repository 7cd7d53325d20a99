"""Conversion between PermissionModel and the ACL SETUSER rule grammar.

Rules are sent to Redis as individual tokens e.g. ``["reset", "on", "~app:*"]``
and reported back by ACL GETUSER as space separated lines grouped by kind. Token
prefixes overlap (``~`` and ``%R~``, ``+`` and ``+@``) so the most specific prefix
is always checked first.
"""

import hashlib
from dataclasses import dataclass, field

from .acl import ACLDescriptor, PermissionModel

RESET = "reset"
ENABLED = "on"
DISABLED = "off"
PASSWORD_HASH_PREFIX = "#"
KEY_PREFIX = "~"
READONLY_KEY_PREFIX = "%R~"
WRITEONLY_KEY_PREFIX = "%W~"
CHANNEL_PREFIX = "&"
CATEGORY_PREFIX = "+@"
DENIED_CATEGORY_PREFIX = "-@"
COMMAND_PREFIX = "+"
EXCLUDED_COMMAND_PREFIX = "-"
ALL_CATEGORY = "all"


def hash_password(password: str) -> str:
    """Return the hex encoded SHA256 digest of a password.

    This is the form in which Redis stores passwords and accepts them via the
    ``#<hash>`` rule.
    """
    return hashlib.sha256(password.encode()).hexdigest()


def build_acl_rules(model: PermissionModel, password_hashes: list[str]) -> list[str]:
    """Build the ACL SETUSER rules that give a user exactly the modelled access.

    ACL SETUSER adds to a user's existing rules so ``reset`` always comes first to
    clear anything not in the model. If the categories include "all" a single
    ``+@all`` is emitted in place of all category and command rules.

    Args:
        model: The desired state of the user.
        password_hashes: Password hashes to set for the user, applied in order.

    Returns:
        The rule tokens in the order they should be passed to ACL SETUSER.
    """
    rules = [RESET, ENABLED if model.enabled else DISABLED]
    rules.extend(PASSWORD_HASH_PREFIX + h for h in password_hashes)

    for prefix, patterns in (
        (KEY_PREFIX, model.keys),
        (READONLY_KEY_PREFIX, model.readonly_keys),
        (WRITEONLY_KEY_PREFIX, model.writeonly_keys),
        (CHANNEL_PREFIX, model.channels),
    ):
        rules.extend(prefix + pattern for pattern in patterns)

    if ALL_CATEGORY in model.categories:
        rules.append(CATEGORY_PREFIX + ALL_CATEGORY)
        return rules

    for prefix, names in (
        (CATEGORY_PREFIX, model.categories),
        (COMMAND_PREFIX, model.commands),
        (EXCLUDED_COMMAND_PREFIX, model.excluded_commands),
    ):
        rules.extend(prefix + name for name in names)
    return rules


@dataclass
class CommandRules:
    """Command authorisation parsed from the commands line of ACL GETUSER.

    ``denied_categories`` has no counterpart in PermissionModel and is lost when
    the user is next updated.
    """

    categories: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    excluded_commands: list[str] = field(default_factory=list)
    denied_categories: list[str] = field(default_factory=list)


@dataclass
class KeyRules:
    """Key patterns parsed from the keys line of ACL GETUSER."""

    keys: list[str] = field(default_factory=list)
    readonly_keys: list[str] = field(default_factory=list)
    writeonly_keys: list[str] = field(default_factory=list)


@dataclass
class DecodedACL:
    """Everything that can be recovered about a user from ACL GETUSER."""

    enabled: bool
    password_hashes: list[str]
    command_rules: CommandRules
    key_rules: KeyRules
    channels: list[str]


def _split(line: str) -> list[str]:
    return [token for token in line.split(" ") if token]


def parse_enabled(flags: list[str]) -> bool:
    """Whether the flags reported for a user mark it as enabled."""
    return ENABLED in flags


def parse_commands(line: str) -> CommandRules:
    """Classify the tokens of a commands line.

    Unrecognised tokens are skipped so that rule kinds added by newer versions of
    Redis do not break parsing.
    """
    parsed = CommandRules()
    for token in _split(line):
        if token.startswith(DENIED_CATEGORY_PREFIX):
            parsed.denied_categories.append(token.removeprefix(DENIED_CATEGORY_PREFIX))
        elif token.startswith(CATEGORY_PREFIX):
            parsed.categories.append(token.removeprefix(CATEGORY_PREFIX))
        elif token.startswith(EXCLUDED_COMMAND_PREFIX):
            parsed.excluded_commands.append(
                token.removeprefix(EXCLUDED_COMMAND_PREFIX)
            )
        elif token.startswith(COMMAND_PREFIX):
            parsed.commands.append(token.removeprefix(COMMAND_PREFIX))
    return parsed


def parse_keys(line: str) -> KeyRules:
    """Classify the tokens of a keys line into full, read-only and write-only."""
    parsed = KeyRules()
    for token in _split(line):
        if token.startswith(READONLY_KEY_PREFIX):
            parsed.readonly_keys.append(token.removeprefix(READONLY_KEY_PREFIX))
        elif token.startswith(WRITEONLY_KEY_PREFIX):
            parsed.writeonly_keys.append(token.removeprefix(WRITEONLY_KEY_PREFIX))
        elif token.startswith(KEY_PREFIX):
            parsed.keys.append(token.removeprefix(KEY_PREFIX))
    return parsed


def parse_channels(line: str) -> list[str]:
    """Extract the channel patterns from a channels line."""
    return [
        token.removeprefix(CHANNEL_PREFIX)
        for token in _split(line)
        if token.startswith(CHANNEL_PREFIX)
    ]


def decode_descriptor(descriptor: ACLDescriptor) -> DecodedACL:
    """Decode all of the rule lines of an ACL descriptor."""
    return DecodedACL(
        enabled=parse_enabled(descriptor.flags),
        password_hashes=list(descriptor.passwords),
        command_rules=parse_commands(descriptor.commands),
        key_rules=parse_keys(descriptor.keys),
        channels=parse_channels(descriptor.channels),
    )
