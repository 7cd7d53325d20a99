"""Django management command to start managing an existing Redis ACL user."""

from argparse import ArgumentParser
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from redis_acl_plugin.acl import MalformedDescriptorError
from redis_acl_plugin.models import ACLUser
from redis_acl_plugin.redis_client import RedisACLError
from redis_acl_plugin.tasks import get_reconciler


class Command(BaseCommand):
    """Create an ACLUser from the current state of a user in Redis."""

    help = __doc__

    def add_arguments(self, parser: ArgumentParser) -> None:
        """Add commandline options."""
        parser.add_argument("name", help="Name of the ACL user.")
        parser.add_argument(
            "--no-save",
            action="store_true",
            help="Do not save the ACL table after changes to this user.",
        )

    def handle(  # type: ignore[misc]
        self, name: str, no_save: bool = False, **kwargs: Any
    ) -> None:
        """Command business logic."""
        if ACLUser.objects.filter(name=name).exists():
            raise CommandError(f"ACL user '{name}' is already managed.")

        try:
            observed = get_reconciler().import_user(name)
        except (MalformedDescriptorError, RedisACLError) as e:
            raise CommandError(str(e)) from e
        if observed is None:
            raise CommandError(f"ACL user '{name}' not found in Redis.")

        observed.save_on_change = not no_save
        ACLUser.from_permission_model(observed).save()
        self.stdout.write(f"Imported ACL user '{name}'.")
