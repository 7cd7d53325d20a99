"""Settings for the Redis ACL plugin.

These are intended to be imported into the project level settings.
"""

from environs import Env

ENV = Env()

REDIS_ACL_ADDRESS = ENV.str("REDIS_ACL_ADDRESS", default="")
"""Address of the Redis server in the form host:port."""
REDIS_ACL_USERNAME = ENV.str("REDIS_ACL_USERNAME", default="")
"""Username used to authenticate with Redis."""
REDIS_ACL_PASSWORD = ENV.str("REDIS_ACL_PASSWORD", default="")
"""Associated password."""
REDIS_ACL_SSL = ENV.bool("REDIS_ACL_SSL", default=False)
"""If the connection to Redis should use TLS."""
REDIS_ACL_SOCKET_TIMEOUT = ENV.float("REDIS_ACL_SOCKET_TIMEOUT", default=10.0)
"""Timeout in seconds for connecting to and awaiting replies from Redis."""

REDIS_ACL_ENABLED = bool(REDIS_ACL_ADDRESS)
"""Computed value of whether Redis integration is enabled."""
