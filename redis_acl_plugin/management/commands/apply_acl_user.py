"""Django management command to apply an ACL user to Redis."""

from argparse import ArgumentParser
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from redis_acl_plugin.acl import MalformedDescriptorError
from redis_acl_plugin.models import ACLUser
from redis_acl_plugin.reconcile import (
    ACLUserAlreadyExistsError,
    MissingCredentialError,
)
from redis_acl_plugin.redis_client import RedisACLError
from redis_acl_plugin.tasks import apply_acl_user


class Command(BaseCommand):
    """Create or update an ACL user in Redis from its database entry."""

    help = __doc__

    def add_arguments(self, parser: ArgumentParser) -> None:
        """Add commandline options."""
        parser.add_argument("name", help="Name of the ACL user.")
        parser.add_argument(
            "--password",
            default=None,
            help="Password to set. Required on creation or to rotate the password.",
        )

    def handle(  # type: ignore[misc]
        self, name: str, password: str | None = None, **kwargs: Any
    ) -> None:
        """Command business logic."""
        try:
            applied = apply_acl_user(name, password)
        except ACLUser.DoesNotExist:
            raise CommandError(f"No ACLUser named '{name}'.")
        except (
            ACLUserAlreadyExistsError,
            MissingCredentialError,
            MalformedDescriptorError,
            RedisACLError,
        ) as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            f"Applied ACL user '{applied.name}' with "
            f"{len(applied.password_hashes)} password(s)."
        )
