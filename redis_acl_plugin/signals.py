"""Django signals."""

from django.conf import settings
from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import ACLUser
from .tasks import delete_acl_user_in_background


@receiver(post_delete, sender=ACLUser)
def remove_redis_acl_user(sender, instance, **kwargs):
    """Remove the ACL user from Redis when its ACLUser is deleted."""
    if not settings.REDIS_ACL_ENABLED:
        return

    delete_acl_user_in_background(instance.name, instance.acl_save)
