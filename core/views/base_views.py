from django.db.models import Q

from accounts.permissions import is_admin, is_parent
from accounts.services import has_privilege


def assigned_class_filter(user, class_field='class_name', stream_field='stream'):
    """
    Q matching rows in the classes assigned to a teacher.

    An assignment without a stream covers every stream of the class. A
    teacher with no assignments matches nothing.
    """
    query = Q(pk__in=[])
    for assignment in user.assigned_classes or []:
        class_name = assignment.get('class_name')
        if not class_name:
            continue
        condition = Q(**{class_field: class_name})
        if assignment.get('stream_name'):
            condition &= Q(**{f'{stream_field}__iexact': assignment['stream_name']})
        query |= condition
    return query


def scope_students(queryset, user, prefix=''):
    """Limit a queryset of students (or rows pointing at students) to what the user may see."""
    if is_admin(user):
        return queryset
    if is_parent(user):
        return queryset.filter(**{f'{prefix}parent_assignments__parent': user}).distinct()
    if user.role == 'TEACHER':
        return queryset.filter(
            assigned_class_filter(user, f'{prefix}class_name', f'{prefix}stream')
        )
    return queryset


def can_manage(user, *privileges):
    return is_admin(user) or has_privilege(user, *privileges)
