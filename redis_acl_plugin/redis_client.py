"""Module for performing ACL operations on a Redis server.

Each operation opens a new connection and closes it when done. Commands are sent via
``execute_command`` with the subcommand as a separate argument so that redis-py does
not apply its own parsing to the reply.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass

from django.conf import settings
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .acl import ACLDescriptor

DEFAULT_REDIS_PORT = 6379

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedisConnectionConfig:
    """Connection details for the Redis server whose ACL users are managed.

    Args:
        address: Server address in the form host:port.
        username: Username to authenticate as, empty for the default user.
        password: Password for username.
        ssl: Whether to connect using TLS.
        socket_timeout: Timeout in seconds for connecting and awaiting replies.
    """

    address: str
    username: str = ""
    password: str = ""
    ssl: bool = False
    socket_timeout: float | None = None

    @classmethod
    def from_settings(cls) -> "RedisConnectionConfig":
        """Create a config from the REDIS_ACL_* Django settings."""
        return cls(
            address=settings.REDIS_ACL_ADDRESS,
            username=settings.REDIS_ACL_USERNAME,
            password=settings.REDIS_ACL_PASSWORD,
            ssl=settings.REDIS_ACL_SSL,
            socket_timeout=settings.REDIS_ACL_SOCKET_TIMEOUT,
        )

    def _split_address(self) -> tuple[str, str]:
        # IPv6 addresses must be bracketed, e.g. [::1]:6379
        if self.address.startswith("["):
            host, _, rest = self.address[1:].partition("]")
            return host, rest.removeprefix(":")
        host, _, port = self.address.partition(":")
        return host, port

    @property
    def host(self) -> str:
        """Host part of the address."""
        return self._split_address()[0]

    @property
    def port(self) -> int:
        """Port part of the address, or the Redis default if not given."""
        port = self._split_address()[1]
        return int(port) if port else DEFAULT_REDIS_PORT


def validate_redis_address(address: str) -> None:
    """Validate a Redis server address.

    Args:
        address: Address in the form host:port or host, with IPv6 hosts enclosed in
            square brackets.

    Raises:
        ValueError: If the host is empty, an IPv6 host is not bracketed or the port
            is not a valid port number.
    """
    config = RedisConnectionConfig(address=address)
    if not address.startswith("[") and address.count(":") > 1:
        raise ValueError(
            f"Redis address '{address}' needs square brackets around an IPv6 host."
        )
    if not config.host:
        raise ValueError(f"Redis address '{address}' has no host.")
    try:
        port = config.port
    except ValueError:
        raise ValueError(f"Redis address '{address}' has a non-numeric port.")
    if not 0 < port < 65536:
        raise ValueError(f"Redis port {port} is outside of the valid range.")


class RedisACLError(Exception):
    """Base class for errors encountered when managing ACL users in Redis."""


class RedisUnavailableError(RedisACLError):
    """Unable to communicate with the Redis server."""


class ACLUserNotFoundError(RedisACLError):
    """The requested ACL user does not exist."""


class ACLGetUserError(RedisACLError):
    """Dedicated exception for errors encountered when fetching an ACL user."""


class ACLSetUserError(RedisACLError):
    """Dedicated exception for errors encountered when setting ACL user rules."""


class ACLDeleteUserError(RedisACLError):
    """Dedicated exception for errors encountered when deleting an ACL user."""


class ACLSaveError(RedisACLError):
    """Dedicated exception for errors encountered when saving the ACL table."""


@contextmanager
def _reraise_redis_errors(
    error_class: type[RedisACLError], message: str
) -> Generator[None, None, None]:
    """Convert redis-py exceptions into the exceptions of this module."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise RedisUnavailableError(f"{message} - {e}") from e
    except RedisError as e:
        raise error_class(f"{message} - {e}") from e


class RedisACLClient:
    """Client for the ACL command family of a Redis server.

    Args:
        config: Connection details for the server.
    """

    def __init__(self, config: RedisConnectionConfig) -> None:
        """Initialise the client with the connection details."""
        self.config = config

    def _get_redis_connection(self) -> Redis:
        return Redis(
            host=self.config.host,
            port=self.config.port,
            username=self.config.username or None,
            password=self.config.password or None,
            ssl=self.config.ssl,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_timeout,
            decode_responses=True,
        )

    def get_user(self, name: str) -> ACLDescriptor:
        """Get the ACL rules of a user.

        Args:
            name: Name of the ACL user.

        Raises:
            ACLUserNotFoundError: If the user does not exist.
            MalformedDescriptorError: If the reply has an unexpected shape.
        """
        with (
            self._get_redis_connection() as conn,
            _reraise_redis_errors(
                ACLGetUserError, f"Failed to get ACL user '{name}'"
            ),
        ):
            response = conn.execute_command("ACL", "GETUSER", name)
        if response is None:
            raise ACLUserNotFoundError(f"ACL user '{name}' not found")
        return ACLDescriptor.from_response(response)

    def set_user(self, name: str, rules: list[str]) -> None:
        """Create or modify an ACL user by applying rules.

        Args:
            name: Name of the ACL user.
            rules: Rule tokens as accepted by ACL SETUSER.
        """
        with (
            self._get_redis_connection() as conn,
            _reraise_redis_errors(
                ACLSetUserError, f"Failed to set ACL user '{name}'"
            ),
        ):
            conn.execute_command("ACL", "SETUSER", name, *rules)
        logger.info(f"Applied {len(rules)} ACL rules to user '{name}'.")

    def delete_user(self, name: str) -> bool:
        """Delete an ACL user.

        Returns:
            False if the user did not exist, True otherwise.
        """
        with (
            self._get_redis_connection() as conn,
            _reraise_redis_errors(
                ACLDeleteUserError, f"Failed to delete ACL user '{name}'"
            ),
        ):
            deleted = conn.execute_command("ACL", "DELUSER", name)
        if not deleted:
            logger.warning(f"ACL user '{name}' did not exist when deleted.")
            return False
        logger.info(f"Deleted ACL user '{name}'.")
        return True

    def save_config(self) -> None:
        """Persist the in-memory ACL table to the server's ACL file."""
        with (
            self._get_redis_connection() as conn,
            _reraise_redis_errors(ACLSaveError, "Failed to save ACL table"),
        ):
            conn.execute_command("ACL", "SAVE")
        logger.info("Saved ACL table.")
