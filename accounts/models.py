from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

ROLE_CHOICES = [
    ('ADMIN', 'Administrator'),
    ('SUPERUSER', 'Superuser'),
    ('TEACHER', 'Teacher'),
    ('SUPER_TEACHER', 'Super Teacher'),
    ('PARENT', 'Parent'),
    ('NURSE', 'Nurse'),
    ('HR', 'Human Resources'),
    ('SECRETARY', 'Secretary'),
    ('ACCOUNTANT', 'Accountant'),
    ('CFO', 'Chief Finance Officer'),
    ('OPM', 'Operations Manager'),
    ('SPONSOR', 'Sponsor'),
    ('SPONSORSHIPS_OVERSEER', 'Sponsorships Overseer'),
    ('SPONSORSHIP_COORDINATOR', 'Sponsorship Coordinator'),
]

ROLE_DISPLAY_NAMES = dict(ROLE_CHOICES)

ADMIN_ROLES = ('ADMIN', 'SUPERUSER')


class CustomUser(AbstractUser):
    role = models.CharField(max_length=30, choices=ROLE_CHOICES, default='TEACHER', db_index=True)
    phone_number = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    # Administrative lock, independent of the temporary axes lockout
    is_locked = models.BooleanField(default=False)
    lock_reason = models.CharField(max_length=255, blank=True)
    locked_at = models.DateTimeField(null=True, blank=True)
    must_change_password = models.BooleanField(default=False)

    # Teachers: [{"class_name": "Senior 1", "stream_name": "A"}, ...]
    assigned_classes = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['username']

    def __str__(self):
        return self.username

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    @property
    def role_display(self):
        return ROLE_DISPLAY_NAMES.get(self.role, self.role)

    @property
    def is_admin_role(self):
        return self.is_superuser or self.role in ADMIN_ROLES

    def teaches(self, class_name, stream_name=None):
        """True when the class (and stream, if given) is in assigned_classes."""
        for assignment in self.assigned_classes or []:
            if assignment.get('class_name') != class_name:
                continue
            if stream_name is None or assignment.get('stream_name') in (None, '', stream_name):
                return True
        return False

    def lock(self, reason=''):
        self.is_locked = True
        self.lock_reason = reason
        self.locked_at = timezone.now()
        self.save(update_fields=['is_locked', 'lock_reason', 'locked_at'])

    def unlock(self):
        self.is_locked = False
        self.lock_reason = ''
        self.locked_at = None
        self.save(update_fields=['is_locked', 'lock_reason', 'locked_at'])


class UserPrivilege(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='privileges'
    )
    privilege = models.CharField(max_length=64)
    assigned_at = models.DateTimeField(auto_now_add=True)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='granted_privileges'
    )
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['user', 'privilege']
        verbose_name = 'User Privilege'
        verbose_name_plural = 'User Privileges'
        constraints = [
            models.UniqueConstraint(fields=['user', 'privilege'], name='unique_user_privilege'),
        ]
        indexes = [
            models.Index(fields=['user', 'privilege'], name='accounts_us_user_id_0c8d14_idx'),
            models.Index(fields=['expires_at'], name='accounts_us_expires_5b1f0e_idx'),
        ]

    def __str__(self):
        return f"{self.user.username}: {self.privilege}"

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= timezone.now()
