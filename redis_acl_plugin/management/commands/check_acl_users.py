"""Django management command to compare ACL users with Redis."""

from typing import Any

from django.core.management.base import BaseCommand

from redis_acl_plugin.tasks import check_acl_consistency


class Command(BaseCommand):
    """Report ACL users whose state in Redis differs from the database."""

    help = __doc__

    def handle(self, **kwargs: Any) -> None:  # type: ignore[misc]
        """Command business logic."""
        discrepancies = check_acl_consistency()
        for name, fields in discrepancies.items():
            self.stdout.write(f"{name}: {', '.join(fields)}")
        if not discrepancies:
            self.stdout.write("All ACL users are consistent with Redis.")
