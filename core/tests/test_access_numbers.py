import datetime

from django.test import SimpleTestCase, TestCase

from core.exceptions import AccessNumberConflict, DuplicateRecordError
from core.models import DroppedAccessNumber
from core.services import access_numbers
from core.tests.factories import StudentFactory


class AccessNumberFormatTest(SimpleTestCase):
    def test_class_and_stream_codes(self):
        self.assertEqual(access_numbers.format_access_number('Senior 2', 'A', 7), 'BA07')
        self.assertEqual(access_numbers.format_access_number('Senior 6', 'sciences', 12), 'FS12')
        self.assertEqual(access_numbers.format_access_number('Primary 1', '', 1), 'XN01')

    def test_sequence_of(self):
        self.assertEqual(access_numbers.sequence_of('CB15'), 15)
        self.assertEqual(access_numbers.sequence_of(''), 0)

    def test_month_codes(self):
        codes = {month: access_numbers.month_code(month) for month in range(1, 13)}
        self.assertEqual(codes[1], 'Ja')
        self.assertEqual(codes[2], 'F')
        self.assertEqual(codes[3], 'Mh')
        self.assertEqual(codes[5], 'My')
        self.assertEqual(codes[6], 'Je')
        self.assertEqual(codes[7], 'Jy')
        self.assertEqual(codes[8], 'At')
        self.assertEqual(codes[9], 'S')


class AllocateAccessNumberTest(TestCase):
    def test_first_student_gets_01(self):
        self.assertEqual(access_numbers.allocate_access_number('Senior 1', 'A'), 'AA01')

    def test_lowest_free_sequence_is_used(self):
        StudentFactory(access_number='AA01')
        StudentFactory(access_number='AA03')
        self.assertEqual(access_numbers.allocate_access_number('Senior 1', 'A'), 'AA02')

    def test_students_off_the_roll_do_not_hold_numbers(self):
        StudentFactory(access_number='AA01', status='left')
        self.assertEqual(access_numbers.allocate_access_number('Senior 1', 'A'), 'AA01')

    def test_requested_number_used_when_free(self):
        self.assertEqual(
            access_numbers.allocate_access_number('Senior 1', 'A', requested='AA09'), 'AA09'
        )

    def test_requested_number_in_use_conflicts(self):
        StudentFactory(access_number='AA05')
        with self.assertRaises(AccessNumberConflict):
            access_numbers.allocate_access_number('Senior 1', 'A', requested='AA05')

    def test_oldest_dropped_number_reused_first(self):
        StudentFactory(access_number='AA01')
        StudentFactory(access_number='AA04')
        DroppedAccessNumber.objects.create(access_number='AA03', class_name='Senior 1', stream_name='A')
        DroppedAccessNumber.objects.create(access_number='AA02', class_name='Senior 1', stream_name='A')

        self.assertEqual(access_numbers.allocate_access_number('Senior 1', 'A'), 'AA03')

    def test_stale_dropped_entry_is_discarded(self):
        StudentFactory(access_number='AA01')
        DroppedAccessNumber.objects.create(access_number='AA01', class_name='Senior 1', stream_name='A')

        self.assertEqual(access_numbers.allocate_access_number('Senior 1', 'A'), 'AA02')
        self.assertFalse(DroppedAccessNumber.objects.exists())

    def test_original_number_reused_when_free(self):
        self.assertEqual(
            access_numbers.allocate_access_number('Senior 1', 'A', original='AA07'), 'AA07'
        )

    def test_consume_removes_from_pool(self):
        DroppedAccessNumber.objects.create(access_number='AA02', class_name='Senior 1', stream_name='A')
        access_numbers.consume_access_number('AA02')
        self.assertFalse(DroppedAccessNumber.objects.filter(access_number='AA02').exists())


class ReleaseAccessNumberTest(TestCase):
    def test_non_highest_number_is_pooled(self):
        leaver = StudentFactory(access_number='AA01', name='Leaver')
        StudentFactory(access_number='AA02')

        entry = access_numbers.release_access_number(leaver, 'Student left')

        self.assertIsNotNone(entry)
        self.assertEqual(entry.access_number, 'AA01')
        self.assertEqual(entry.stream_name, 'A')
        self.assertEqual(entry.student_name, 'Leaver')

    def test_highest_number_is_not_pooled(self):
        StudentFactory(access_number='AA01')
        highest = StudentFactory(access_number='AA02')

        self.assertIsNone(access_numbers.release_access_number(highest, 'Student left'))
        self.assertFalse(DroppedAccessNumber.objects.exists())

    def test_student_off_roll_is_not_pooled(self):
        StudentFactory(access_number='AA02')
        gone = StudentFactory(access_number='AA01', status='expelled')
        self.assertIsNone(access_numbers.release_access_number(gone, 'Student deleted'))


class AdmissionIdTest(TestCase):
    def test_format(self):
        admission_id = access_numbers.generate_admission_id('Senior 2', when=datetime.date(2024, 3, 10))
        self.assertEqual(admission_id, 'Mh24B01')

    def test_counts_existing_ids_with_same_prefix(self):
        StudentFactory(admission_id='Jy24A01')
        StudentFactory(admission_id='Jy24C02')
        StudentFactory(admission_id='Ja24A01')

        admission_id = access_numbers.generate_admission_id('Senior 1', when=datetime.date(2024, 7, 1))
        self.assertEqual(admission_id, 'Jy24A03')

    def test_generated_id_colliding_with_existing_is_rejected(self):
        # One id with the prefix exists, so the next candidate is ...02, which is taken
        StudentFactory(admission_id='Jy24A02')

        with self.assertRaises(DuplicateRecordError):
            access_numbers.generate_admission_id('Senior 1', when=datetime.date(2024, 7, 1))

    def test_a_level_classes_use_x(self):
        admission_id = access_numbers.generate_admission_id('Senior 5', when=datetime.date(2025, 10, 2))
        self.assertEqual(admission_id, 'O25X01')
