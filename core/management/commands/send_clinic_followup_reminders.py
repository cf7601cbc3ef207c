from datetime import date

from django.core.management.base import BaseCommand, CommandError

from core.services.clinic import send_follow_up_reminders


class Command(BaseCommand):
    help = 'Notify nurses and parents of clinic follow-ups that are due'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Treat this day (YYYY-MM-DD) as today')

    def handle(self, *args, **options):
        on_date = None
        if options.get('date'):
            try:
                on_date = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}")

        sent = send_follow_up_reminders(on_date)
        if sent:
            self.stdout.write(self.style.SUCCESS(f'Sent follow-up reminders for {sent} clinic visits'))
        else:
            self.stdout.write('No follow-ups due')
