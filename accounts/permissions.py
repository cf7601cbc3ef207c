# accounts/permissions.py
from rest_framework.permissions import BasePermission

from .services import has_privilege

# ===== ROLE CHECK FUNCTIONS =====

def is_admin(user):
    """Check if user is an administrator or superuser"""
    return user.is_authenticated and (user.is_superuser or user.role in ('ADMIN', 'SUPERUSER'))

def is_teacher(user):
    return user.is_authenticated and user.role in ('TEACHER', 'SUPER_TEACHER')

def is_parent(user):
    return user.is_authenticated and user.role == 'PARENT'

def is_nurse(user):
    return user.is_authenticated and user.role == 'NURSE'


# ===== DRF PERMISSION CLASSES =====

class HasPrivilege(BasePermission):
    """
    Checks the privilege registered for the current action.

    Views declare ``privilege_map = {'list': 'view_students', ...}``; a value
    may be a single name or a tuple meaning "any of". Actions missing from
    the map fall back to the ``'*'`` entry, and when there is none the
    action is open to any authenticated user.
    """

    message = 'You do not have the privilege required for this action.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False

        privilege_map = getattr(view, 'privilege_map', {})
        action = getattr(view, 'action', None) or request.method.lower()
        required = privilege_map.get(action, privilege_map.get('*'))
        if not required:
            return True
        if isinstance(required, str):
            required = (required,)
        return has_privilege(request.user, *required)


class IsAdminRole(BasePermission):
    message = 'Administrator access required.'

    def has_permission(self, request, view):
        return is_admin(request.user)
