# core/services/messaging.py
"""
Who may message whom.

Two layers decide: a role-to-role matrix with per-role limits on message
type and recipient count, and per-user ``message_<role>`` privileges that
open additional recipient roles.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.models import ROLE_CHOICES, ROLE_DISPLAY_NAMES
from accounts.privileges import can_message_role
from accounts.services import effective_privileges
from core.exceptions import DataValidationError, MessagingNotAllowed
from core.models import Message
from core.services.notifications import notify_user

logger = logging.getLogger(__name__)

ALL_ROLES = [role for role, _ in ROLE_CHOICES]
ALL_MESSAGE_TYPES = [message_type for message_type, _ in Message.MESSAGE_TYPES]

DEFAULT_RESTRICTIONS = {
    'message_types': ['general'],
    'max_recipients': 1,
    'requires_approval': False,
}

MESSAGE_RULES = {
    'ADMIN': {
        'can_send_to': ALL_ROLES,
        'message_types': ALL_MESSAGE_TYPES,
        'max_recipients': 1000,
    },
    'SUPERUSER': {
        'can_send_to': ALL_ROLES,
        'message_types': ALL_MESSAGE_TYPES,
        'max_recipients': 1000,
    },
    'SUPER_TEACHER': {
        'can_send_to': ['TEACHER', 'PARENT', 'NURSE', 'ADMIN'],
        'message_types': ['general', 'clinic', 'attendance', 'payment'],
    },
    'TEACHER': {
        'can_send_to': ['ADMIN', 'PARENT', 'NURSE', 'SUPER_TEACHER', 'TEACHER'],
        'message_types': ['general', 'clinic', 'attendance'],
        'max_recipients': 10,
    },
    'PARENT': {
        'can_send_to': ['TEACHER', 'ADMIN', 'NURSE', 'SUPER_TEACHER'],
        'message_types': ['general', 'clinic', 'attendance'],
        'max_recipients': 5,
    },
    'NURSE': {
        'can_send_to': ['TEACHER', 'ADMIN', 'PARENT', 'SUPER_TEACHER'],
        'message_types': ['general', 'clinic', 'attendance'],
        'max_recipients': 10,
    },
    'SPONSOR': {
        'can_send_to': ['SPONSORSHIPS_OVERSEER', 'ADMIN'],
        'message_types': ['general', 'payment'],
        'max_recipients': 3,
        'requires_approval': True,
    },
    'SPONSORSHIPS_OVERSEER': {
        'can_send_to': ['SPONSOR', 'ADMIN', 'SPONSORSHIP_COORDINATOR'],
        'message_types': ['general', 'payment'],
        'max_recipients': 50,
    },
    'SPONSORSHIP_COORDINATOR': {
        'can_send_to': ['SPONSOR', 'SPONSORSHIPS_OVERSEER', 'ADMIN', 'PARENT'],
        'message_types': ['general', 'payment'],
        'max_recipients': 20,
    },
}


def restrictions_for(role):
    rule = MESSAGE_RULES.get(role, {})
    return {key: rule.get(key, default) for key, default in DEFAULT_RESTRICTIONS.items()}


def can_send_to(sender_role, recipient_role, privileges=None):
    rule = MESSAGE_RULES.get(sender_role)
    if rule and recipient_role in rule['can_send_to']:
        return True
    return privileges is not None and can_message_role(privileges, recipient_role)


def validate_message_permissions(sender_role, recipient_role, message_type='general',
                                 recipient_count=1, privileges=None):
    """Return ``(allowed, reason)``; ``reason`` is None when allowed."""
    sender_name = ROLE_DISPLAY_NAMES.get(sender_role, sender_role)
    recipient_name = ROLE_DISPLAY_NAMES.get(recipient_role, recipient_role)

    if not can_send_to(sender_role, recipient_role, privileges):
        return False, f"{sender_name} is not authorized to send messages to {recipient_name}"

    restrictions = restrictions_for(sender_role)
    if message_type not in restrictions['message_types']:
        return False, f"{sender_name} is not authorized to send {message_type} messages"

    if recipient_count > restrictions['max_recipients']:
        return False, (
            f"{sender_name} can only send messages to "
            f"{restrictions['max_recipients']} recipients at once"
        )

    return True, None


def messagable_roles_for(user):
    """Recipient roles open to ``user`` from the matrix and their privileges."""
    roles = set(MESSAGE_RULES.get(user.role, {}).get('can_send_to', []))
    privileges = effective_privileges(user)
    roles.update(role for role in ALL_ROLES if can_message_role(privileges, role))
    return sorted(roles)


def eligible_recipients(user):
    User = get_user_model()
    return (
        User.objects.filter(is_active=True, role__in=messagable_roles_for(user))
        .exclude(pk=user.pk)
        .order_by('role', 'first_name', 'username')
    )


@transaction.atomic
def send_message(sender, recipients, subject, content, message_type='general',
                 priority='normal', student=None):
    """
    Deliver one message per recipient after checking every recipient.

    Nothing is sent when any recipient is refused.
    """
    recipients = list({user.pk: user for user in recipients}.values())
    if not recipients:
        raise DataValidationError("At least one recipient is required")

    privileges = effective_privileges(sender)
    for recipient in recipients:
        allowed, reason = validate_message_permissions(
            sender.role, recipient.role, message_type, len(recipients), privileges
        )
        if not allowed:
            logger.warning(f"Message from {sender.username} to {recipient.username} refused: {reason}")
            raise MessagingNotAllowed(reason, user=sender)

    requires_approval = restrictions_for(sender.role)['requires_approval'] and not sender.is_admin_role
    messages = []
    for recipient in recipients:
        message = Message.objects.create(
            sender=sender,
            recipient=recipient,
            subject=subject,
            content=content,
            message_type=message_type,
            priority=priority,
            student=student,
            requires_approval=requires_approval,
            is_approved=not requires_approval,
        )
        if message.is_approved:
            _notify_recipient(message)
        messages.append(message)

    logger.info(f"{sender.username} sent '{subject}' to {len(messages)} recipients")
    return messages


def approve_message(message, user):
    if message.is_approved:
        return message
    message.is_approved = True
    message.save(update_fields=['is_approved'])
    _notify_recipient(message)
    logger.info(f"Message {message.pk} approved by {user.username}")
    return message


def _notify_recipient(message):
    notify_user(
        message.recipient,
        title=f"New message from {message.sender.display_name}",
        message=message.subject,
        notification_type='MESSAGE',
        link=f"/messages/{message.pk}",
    )
