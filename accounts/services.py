"""
Privilege and account operations shared by the API, signals and commands.
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.exceptions import DataValidationError, DuplicateRecordError, RecordNotFoundError

from .models import UserPrivilege
from .privileges import ALL_PRIVILEGES, default_privileges_for_role, is_known_privilege

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('accounts.security')


def effective_privileges(user):
    """
    Every privilege the user currently holds.

    Superusers and ADMIN accounts hold the whole catalogue; everyone else
    holds their unexpired grants.
    """
    if user is None or not user.is_authenticated:
        return set()
    if user.is_superuser or user.role == 'ADMIN':
        return set(ALL_PRIVILEGES)

    cached = getattr(user, '_privilege_cache', None)
    if cached is not None:
        return cached

    now = timezone.now()
    privileges = set(
        user.privileges.filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))
        .values_list('privilege', flat=True)
    )
    user._privilege_cache = privileges
    return privileges


def _clear_cache(user):
    if hasattr(user, '_privilege_cache'):
        del user._privilege_cache


def has_privilege(user, *names):
    """True when the user holds any of the named privileges."""
    held = effective_privileges(user)
    return any(name in held for name in names)


def grant_privilege(user, name, expires_at=None, by=None):
    if not is_known_privilege(name):
        raise DataValidationError(f"Unknown privilege: {name}")
    if user.privileges.filter(privilege=name).exists():
        raise DuplicateRecordError(f"Privilege {name} already assigned to {user.username}")

    grant = UserPrivilege.objects.create(
        user=user, privilege=name, expires_at=expires_at, assigned_by=by
    )
    _clear_cache(user)
    security_logger.info(
        f"Privilege {name} granted to {user.username} by {getattr(by, 'username', 'system')}"
    )
    return grant


def revoke_privilege(user, name, by=None):
    deleted, _ = user.privileges.filter(privilege=name).delete()
    if not deleted:
        raise RecordNotFoundError(f"{user.username} does not hold privilege {name}")
    _clear_cache(user)
    security_logger.info(
        f"Privilege {name} removed from {user.username} by {getattr(by, 'username', 'system')}"
    )


@transaction.atomic
def reset_privileges(user, names, by=None):
    """Replace all grants of ``user`` with ``names``."""
    unknown = [name for name in names if not is_known_privilege(name)]
    if unknown:
        raise DataValidationError(
            "Unknown privileges supplied", validation_errors={'privileges': unknown}
        )

    user.privileges.all().delete()
    UserPrivilege.objects.bulk_create([
        UserPrivilege(user=user, privilege=name, assigned_by=by)
        for name in dict.fromkeys(names)
    ])
    _clear_cache(user)
    security_logger.info(
        f"Privileges of {user.username} reset to {len(set(names))} entries "
        f"by {getattr(by, 'username', 'system')}"
    )


def assign_default_privileges(users, by=None):
    """Reset each user's grants to the defaults of their role. Returns the count."""
    count = 0
    for user in users:
        reset_privileges(user, default_privileges_for_role(user.role), by=by)
        count += 1
    logger.info(f"Assigned default privileges to {count} users")
    return count


def purge_expired_privileges():
    deleted, _ = UserPrivilege.objects.filter(expires_at__lte=timezone.now()).delete()
    if deleted:
        logger.info(f"Removed {deleted} expired privilege grants")
    return deleted
