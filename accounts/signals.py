# accounts/signals.py
import logging

from axes.signals import user_locked_out
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .privileges import default_privileges_for_role
from .services import reset_privileges

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('accounts.security')


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def seed_role_privileges(sender, instance, created, raw=False, **kwargs):
    """New accounts start with the default privileges of their role."""
    if not created or raw:
        return
    defaults = default_privileges_for_role(instance.role)
    if defaults:
        reset_privileges(instance, defaults)
        logger.info(f"Seeded {len(defaults)} default privileges for {instance.username} ({instance.role})")


@receiver(user_locked_out)
def notify_admins_of_lockout(sender, request=None, username=None, ip_address=None, **kwargs):
    from core.services.notifications import notify_admins

    security_logger.warning(f"Account locked after repeated failed logins: {username} from {ip_address}")
    notify_admins(
        title="Account Locked",
        message=(
            f"The account '{username}' was locked after too many failed login "
            f"attempts from {ip_address or 'an unknown address'}."
        ),
        notification_type='SECURITY',
    )
