from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.models import ROLE_CHOICES
from accounts.services import assign_default_privileges


class Command(BaseCommand):
    help = 'Reset user privileges to the defaults of their role'

    def add_arguments(self, parser):
        parser.add_argument('--role', help='Only users with this role')
        parser.add_argument('--username', action='append', dest='usernames', help='Only this user (repeatable)')

    def handle(self, *args, **options):
        User = get_user_model()
        users = User.objects.all()

        role = options.get('role')
        if role:
            role = role.upper()
            if role not in dict(ROLE_CHOICES):
                raise CommandError(f"Unknown role: {options['role']}")
            users = users.filter(role=role)
        if options.get('usernames'):
            users = users.filter(username__in=options['usernames'])

        count = assign_default_privileges(users)
        self.stdout.write(self.style.SUCCESS(f'Assigned default privileges to {count} users'))
