# core/services/notifications.py
"""
In-app notification fan-out.

Notifications are a side effect of other operations; a failure to notify
is logged and never undoes the operation that triggered it.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from core.models import Notification

logger = logging.getLogger(__name__)

ADMIN_ROLES = ('ADMIN', 'SUPERUSER')


def notify_user(recipient, title, message, notification_type='INFO', link=''):
    # Savepoint so a failed insert leaves the caller's transaction usable
    try:
        with transaction.atomic():
            return Notification.objects.create(
                recipient=recipient,
                title=title,
                message=message,
                notification_type=notification_type,
                link=link or '',
            )
    except DatabaseError as e:
        logger.error(f"Could not notify {getattr(recipient, 'username', recipient)}: {str(e)}")
        return None


def notify_users(recipients, title, message, notification_type='INFO', link=''):
    """Create one notification per distinct recipient; returns how many were created."""
    recipients = {user.pk: user for user in recipients if user is not None}
    notifications = [
        Notification(
            recipient=user,
            title=title,
            message=message,
            notification_type=notification_type,
            link=link or '',
        )
        for user in recipients.values()
    ]
    if not notifications:
        return 0
    try:
        with transaction.atomic():
            Notification.objects.bulk_create(notifications)
    except DatabaseError as e:
        logger.error(f"Notification fan-out '{title}' failed: {str(e)}")
        return 0
    logger.debug(f"Sent '{title}' to {len(notifications)} users")
    return len(notifications)


def users_with_roles(roles):
    User = get_user_model()
    return User.objects.filter(is_active=True, role__in=roles)


def parents_of(student):
    User = get_user_model()
    return User.objects.filter(
        is_active=True, role='PARENT', child_assignments__student=student
    ).distinct()


def admin_users():
    User = get_user_model()
    return User.objects.filter(is_active=True).filter(Q(role__in=ADMIN_ROLES) | Q(is_superuser=True))


def notify_role(roles, title, message, notification_type='INFO', link=''):
    if isinstance(roles, str):
        roles = [roles]
    return notify_users(users_with_roles(roles), title, message, notification_type, link)


def notify_admins(title, message, notification_type='INFO', link=''):
    return notify_users(admin_users(), title, message, notification_type, link)


def get_unread_count(user):
    return Notification.get_unread_count_for_user(user)


def mark_all_read(user):
    return Notification.objects.filter(recipient=user, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )
