import logging

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import DataValidationError
from core.services.academics import recompute_positions

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Rank students for a term and store their class positions'

    def add_arguments(self, parser):
        parser.add_argument('--term', required=True, help='e.g. "Term 1"')
        parser.add_argument('--year', required=True, type=int)
        parser.add_argument('--class', dest='class_name', help='Limit to one class, e.g. "Senior 2"')
        parser.add_argument('--stream', help='Limit to one stream')

    def handle(self, *args, **options):
        try:
            updated = recompute_positions(
                options['term'],
                options['year'],
                class_name=options.get('class_name'),
                stream=options.get('stream'),
            )
        except DataValidationError as e:
            raise CommandError(e.message)

        if updated:
            self.stdout.write(self.style.SUCCESS(f'Updated positions for {updated} records'))
        else:
            self.stdout.write('No academic records matched')
