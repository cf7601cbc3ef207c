"""
Privilege catalogue.

A privilege is a plain string such as ``view_students``. Users hold
privileges through ``UserPrivilege`` rows; new accounts are seeded with
the defaults of their role and administrators may widen or narrow the set
per user afterwards.
"""

STUDENT_PRIVILEGES = [
    'view_students', 'add_student', 'edit_student', 'delete_student',
    'flag_student', 're_admit_student', 'view_student_details',
    'edit_student_conduct', 'admit_from_overseer',
]

USER_PRIVILEGES = [
    'view_users', 'add_user', 'edit_user', 'delete_user', 'lock_user',
    'unlock_user', 'reset_user_password', 'assign_privileges',
    'remove_privileges', 'assign_parent_students',
]

CLINIC_PRIVILEGES = [
    'view_clinic_records', 'add_clinic_record', 'edit_clinic_record',
    'delete_clinic_record', 'export_clinic_records', 'notify_clinic_visits',
]

STAFF_PRIVILEGES = [
    'view_staff', 'add_staff', 'edit_staff', 'delete_staff',
    'upload_staff_cv', 'upload_staff_passport',
]

TIMETABLE_PRIVILEGES = [
    'view_timetables', 'add_timetable', 'edit_timetable', 'delete_timetable',
]

ATTENDANCE_PRIVILEGES = [
    'view_attendance', 'mark_attendance', 'delete_attendance',
]

ACADEMIC_PRIVILEGES = [
    'view_student_marks', 'add_student_marks', 'edit_student_marks',
    'view_report_cards', 'generate_report_cards',
]

MESSAGE_PRIVILEGES = [
    'view_messages', 'send_message', 'reply_message', 'mark_message_read',
    'delete_message', 'export_messages',
]

WEEKLY_REPORT_PRIVILEGES = [
    'view_weekly_reports', 'submit_reports', 'review_weekly_reports',
    'export_weekly_reports',
]

FINANCIAL_PRIVILEGES = [
    'view_financial', 'view_payments', 'record_payment',
]

SETTINGS_PRIVILEGES = [
    'view_settings', 'edit_settings', 'change_password', 'update_profile',
    'view_classes',
]

# One privilege per role that may be written to; message_admin is implied for everyone
MESSAGING_PRIVILEGES = {
    'message_admin': 'ADMIN',
    'message_teacher': 'TEACHER',
    'message_super_teacher': 'SUPER_TEACHER',
    'message_parent': 'PARENT',
    'message_nurse': 'NURSE',
    'message_sponsor': 'SPONSOR',
    'message_sponsorships_overseer': 'SPONSORSHIPS_OVERSEER',
    'message_sponsorship_coordinator': 'SPONSORSHIP_COORDINATOR',
    'message_superuser': 'SUPERUSER',
}

DEFAULT_MESSAGING_PRIVILEGES = ['message_admin']

ALL_PRIVILEGES = sorted(set(
    STUDENT_PRIVILEGES
    + USER_PRIVILEGES
    + CLINIC_PRIVILEGES
    + STAFF_PRIVILEGES
    + TIMETABLE_PRIVILEGES
    + ATTENDANCE_PRIVILEGES
    + ACADEMIC_PRIVILEGES
    + MESSAGE_PRIVILEGES
    + WEEKLY_REPORT_PRIVILEGES
    + FINANCIAL_PRIVILEGES
    + SETTINGS_PRIVILEGES
    + list(MESSAGING_PRIVILEGES)
))

_BASIC_MESSAGING = ['view_messages', 'send_message', 'reply_message', 'mark_message_read']
_PERSONAL_SETTINGS = ['view_settings', 'change_password', 'update_profile']

ROLE_DEFAULT_PRIVILEGES = {
    'ADMIN': list(ALL_PRIVILEGES),
    'SUPERUSER': [
        'view_students', 'view_student_details', 'view_users', 'view_clinic_records',
        'export_clinic_records', 'view_staff', 'view_timetables', 'view_student_marks',
        'view_report_cards', 'view_messages', 'export_messages', 'view_weekly_reports',
        'export_weekly_reports', 'view_financial', 'view_payments', 'view_settings',
        'view_classes', 'view_attendance',
    ],
    'TEACHER': [
        'view_students', 'add_student', 'edit_student', 'view_student_details',
        'add_student_marks', 'edit_student_marks', 'view_student_marks',
        'view_report_cards', 'generate_report_cards', 'view_timetables',
        'view_attendance', 'mark_attendance',
        'view_weekly_reports', 'submit_reports', 'export_weekly_reports',
        'view_classes', 'message_parent', 'message_nurse',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'SUPER_TEACHER': [
        'view_students', 'add_student', 'edit_student', 'view_student_details',
        'edit_student_conduct', 'add_student_marks', 'edit_student_marks',
        'view_student_marks', 'view_report_cards', 'generate_report_cards',
        'view_timetables', 'edit_timetable', 'view_attendance', 'mark_attendance',
        'delete_attendance', 'view_weekly_reports', 'submit_reports',
        'export_weekly_reports', 'view_classes', 'message_teacher', 'message_parent',
        'message_nurse',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'PARENT': [
        'view_students', 'view_student_details', 'view_financial', 'view_payments',
        'view_report_cards', 'view_attendance', 'message_teacher', 'message_nurse',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'NURSE': [
        'view_students', 'view_clinic_records', 'add_clinic_record', 'edit_clinic_record',
        'delete_clinic_record', 'export_clinic_records', 'notify_clinic_visits',
        'message_parent', 'message_teacher',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'HR': [
        'view_staff', 'add_staff', 'edit_staff', 'delete_staff', 'upload_staff_cv',
        'upload_staff_passport', 'view_weekly_reports', 'submit_reports',
        'export_weekly_reports', 'view_settings', 'view_financial',
    ],
    'SECRETARY': [
        'view_students', 'add_student', 'edit_student', 'view_student_details',
        're_admit_student', 'admit_from_overseer', 'view_classes', 'view_financial',
        'view_payments', 'record_payment', 'view_report_cards', 'view_attendance',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'ACCOUNTANT': [
        'view_students', 'view_student_details', 'view_financial', 'view_payments',
        'record_payment',
        'view_settings', 'edit_settings',
    ] + _BASIC_MESSAGING,
    'CFO': [
        'view_financial', 'view_payments', 'view_settings', 'edit_settings',
        'view_weekly_reports', 'export_weekly_reports', 'change_password',
        'update_profile',
    ] + _BASIC_MESSAGING,
    'OPM': [
        'view_students', 'view_staff', 'view_financial', 'view_weekly_reports',
        'submit_reports',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'SPONSOR': [
        'view_students', 'view_student_details', 'view_financial', 'view_payments',
        'message_sponsorships_overseer',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'SPONSORSHIPS_OVERSEER': [
        'view_students', 'add_student', 'edit_student', 'view_student_details',
        'admit_from_overseer', 'view_financial', 'view_weekly_reports', 'submit_reports',
        'message_sponsor', 'message_sponsorship_coordinator',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
    'SPONSORSHIP_COORDINATOR': [
        'view_students', 'view_student_details', 'message_sponsor',
        'message_sponsorships_overseer', 'message_parent',
    ] + _BASIC_MESSAGING + _PERSONAL_SETTINGS,
}


def default_privileges_for_role(role):
    """Role defaults, always including the implied messaging privileges."""
    defaults = ROLE_DEFAULT_PRIVILEGES.get((role or '').upper())
    if defaults is None:
        return []
    return with_default_messaging_privileges(defaults)


def with_default_messaging_privileges(privileges=None):
    merged = list(DEFAULT_MESSAGING_PRIVILEGES)
    for privilege in privileges or []:
        if privilege not in merged:
            merged.append(privilege)
    return merged


def is_known_privilege(name):
    return name in ALL_PRIVILEGES


def messagable_roles(privileges):
    """Roles reachable through the message_<role> privileges held."""
    effective = with_default_messaging_privileges(privileges)
    return [role for privilege, role in MESSAGING_PRIVILEGES.items() if privilege in effective]


def can_message_role(privileges, target_role):
    return target_role in messagable_roles(privileges)
