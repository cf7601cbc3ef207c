import core.models.base
import core.models.configuration
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


CLASS_CHOICES = [
    ('Senior 1', 'Senior 1'), ('Senior 2', 'Senior 2'), ('Senior 3', 'Senior 3'),
    ('Senior 4', 'Senior 4'), ('Senior 5', 'Senior 5'), ('Senior 6', 'Senior 6'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SchoolSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('school_name', models.CharField(blank=True, max_length=200)),
                ('address', models.TextField(blank=True)),
                ('po_box', models.CharField(blank=True, max_length=100)),
                ('phone', models.CharField(blank=True, max_length=50)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('website', models.CharField(blank=True, max_length=200)),
                ('motto', models.CharField(blank=True, max_length=255)),
                ('hr_name', models.CharField(blank=True, help_text='Signatory on appointment letters', max_length=150)),
                ('head_teacher_name', models.CharField(blank=True, max_length=150)),
                ('document_colour', models.CharField(default='#1e3a8a', max_length=7)),
                ('current_term', models.CharField(default='Term 1', max_length=10)),
                ('current_year', models.PositiveIntegerField(blank=True, null=True)),
                ('grade_bands', models.JSONField(blank=True, default=dict)),
                ('fee_structure', models.JSONField(blank=True, default=core.models.configuration.default_fee_structure)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'School Settings',
                'verbose_name_plural': 'School Settings',
            },
        ),
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('access_number', models.CharField(blank=True, db_index=True, max_length=40)),
                ('admission_id', models.CharField(blank=True, db_index=True, max_length=40)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('age', models.PositiveSmallIntegerField(default=0)),
                ('gender', models.CharField(blank=True, choices=[('M', 'Male'), ('F', 'Female')], max_length=1)),
                ('class_name', models.CharField(choices=CLASS_CHOICES, max_length=20)),
                ('stream', models.CharField(blank=True, max_length=30)),
                ('residence_type', models.CharField(choices=[('Day', 'Day'), ('Boarding', 'Boarding')], default='Day', max_length=10)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('address', models.TextField(blank=True)),
                ('medical_condition', models.TextField(blank=True)),
                ('parent_name', models.CharField(blank=True, max_length=200)),
                ('parent_phone', models.CharField(blank=True, max_length=20)),
                ('parent_email', models.EmailField(blank=True, max_length=254)),
                ('parent_relationship', models.CharField(blank=True, max_length=50)),
                ('total_fees', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('fees_paid', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('status', models.CharField(choices=[('active', 'Active'), ('pending', 'Pending placement'), ('re-admitted', 'Re-admitted'), ('left', 'Left'), ('expelled', 'Expelled'), ('suspended', 'Suspended')], db_index=True, default='active', max_length=20)),
                ('flag_comment', models.TextField(blank=True)),
                ('conduct_notes', models.JSONField(blank=True, default=list)),
                ('admitted_by', models.CharField(choices=[('admin', 'Administration'), ('secretary', 'Secretary'), ('overseer', 'Sponsorships Overseer')], default='admin', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='admitted_students', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Student',
                'verbose_name_plural': 'Students',
                'ordering': ['class_name', 'stream', 'name'],
                'indexes': [
                    models.Index(fields=['class_name', 'stream', 'status'], name='core_student_class_status_idx'),
                    models.Index(fields=['name'], name='core_student_name_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DroppedAccessNumber',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('access_number', models.CharField(max_length=40)),
                ('class_name', models.CharField(choices=CLASS_CHOICES, max_length=20)),
                ('stream_name', models.CharField(blank=True, max_length=30)),
                ('student_name', models.CharField(blank=True, max_length=200)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('dropped_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Dropped Access Number',
                'verbose_name_plural': 'Dropped Access Numbers',
                'ordering': ['dropped_at', 'id'],
                'indexes': [
                    models.Index(fields=['class_name', 'stream_name', 'dropped_at'], name='core_dropped_class_stream_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ParentAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='child_assignments', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='parent_assignments', to='core.student')),
            ],
            options={
                'verbose_name': 'Parent Assignment',
                'verbose_name_plural': 'Parent Assignments',
                'constraints': [models.UniqueConstraint(fields=('parent', 'student'), name='unique_parent_student')],
            },
        ),
        migrations.CreateModel(
            name='ClinicRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('visit_date', models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ('visit_time', models.TimeField(blank=True, null=True)),
                ('symptoms', models.TextField()),
                ('diagnosis', models.TextField(blank=True)),
                ('treatment', models.TextField(blank=True)),
                ('medication', models.TextField(blank=True)),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('follow_up_required', models.BooleanField(default=False)),
                ('follow_up_date', models.DateField(blank=True, null=True)),
                ('follow_up_reminder_sent', models.BooleanField(default=False)),
                ('parent_notified', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('resolved', 'Resolved'), ('under_observation', 'Under observation'), ('referred', 'Referred'), ('follow_up', 'Follow-up')], default='resolved', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('nurse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='clinic_records', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='clinic_records', to='core.student')),
            ],
            options={
                'verbose_name': 'Clinic Record',
                'verbose_name_plural': 'Clinic Records',
                'ordering': ['-visit_date', '-visit_time', '-id'],
                'indexes': [
                    models.Index(fields=['student', 'visit_date'], name='core_clinic_student_date_idx'),
                    models.Index(fields=['follow_up_required', 'follow_up_date'], name='core_clinic_follow_up_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Staff',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('role', models.CharField(blank=True, max_length=100)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('village', models.CharField(blank=True, max_length=100)),
                ('next_of_kin', models.CharField(blank=True, max_length=200)),
                ('next_of_kin_phone', models.CharField(blank=True, max_length=20)),
                ('national_id', models.CharField(blank=True, max_length=30)),
                ('medical_issues', models.TextField(blank=True)),
                ('contract_duration_months', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('amount_to_pay', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('bank_name', models.CharField(blank=True, max_length=100)),
                ('bank_account_name', models.CharField(blank=True, max_length=200)),
                ('bank_account_number', models.CharField(blank=True, max_length=50)),
                ('mobile_money_provider', models.CharField(blank=True, max_length=50)),
                ('mobile_money_number', models.CharField(blank=True, max_length=20)),
                ('hr_notes', models.TextField(blank=True)),
                ('cv', models.FileField(blank=True, upload_to=core.models.base.staff_document_path)),
                ('passport_photo', models.ImageField(blank=True, upload_to=core.models.base.staff_document_path)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Staff Member',
                'verbose_name_plural': 'Staff',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='StaffPayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('period', models.CharField(blank=True, help_text='e.g. 2024-05', max_length=20)),
                ('method', models.CharField(choices=[('bank', 'Bank transfer'), ('mobile_money', 'Mobile money'), ('cash', 'Cash')], default='bank', max_length=20)),
                ('reference', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('paid_at', models.DateTimeField(auto_now_add=True)),
                ('paid_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='core.staff')),
            ],
            options={
                'verbose_name': 'Staff Payment',
                'verbose_name_plural': 'Staff Payments',
                'ordering': ['-paid_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='TimetableEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day', models.CharField(choices=[('Monday', 'Monday'), ('Tuesday', 'Tuesday'), ('Wednesday', 'Wednesday'), ('Thursday', 'Thursday'), ('Friday', 'Friday')], max_length=10)),
                ('day_index', models.PositiveSmallIntegerField(default=0, editable=False)),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('subject', models.CharField(max_length=100)),
                ('class_name', models.CharField(choices=CLASS_CHOICES, max_length=20)),
                ('stream_name', models.CharField(blank=True, max_length=30)),
                ('room', models.CharField(blank=True, max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='timetable_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Timetable Entry',
                'verbose_name_plural': 'Timetable Entries',
                'ordering': ['day_index', 'start_time'],
                'indexes': [
                    models.Index(fields=['class_name', 'stream_name', 'day_index'], name='core_tt_class_stream_day_idx'),
                    models.Index(fields=['teacher', 'day_index'], name='core_tt_teacher_day_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AcademicRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('term', models.CharField(choices=[('Term 1', 'Term 1'), ('Term 2', 'Term 2'), ('Term 3', 'Term 3')], max_length=10)),
                ('year', models.PositiveIntegerField()),
                ('subjects', models.JSONField(blank=True, default=dict)),
                ('subject_totals', models.JSONField(blank=True, default=dict)),
                ('total_marks', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8)),
                ('total_possible', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8)),
                ('percentage', models.PositiveSmallIntegerField(default=0)),
                ('overall_grade', models.CharField(blank=True, max_length=3)),
                ('position', models.PositiveIntegerField(blank=True, null=True)),
                ('teacher_comment', models.TextField(blank=True)),
                ('head_teacher_comment', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='academic_records', to='core.student')),
                ('teacher', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_results', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Academic Record',
                'verbose_name_plural': 'Academic Records',
                'ordering': ['-year', 'term', 'position'],
                'indexes': [models.Index(fields=['term', 'year'], name='core_acad_term_year_idx')],
                'constraints': [models.UniqueConstraint(fields=('student', 'term', 'year'), name='unique_student_term_year')],
            },
        ),
        migrations.CreateModel(
            name='Message',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subject', models.CharField(max_length=200)),
                ('content', models.TextField()),
                ('message_type', models.CharField(choices=[('general', 'General'), ('clinic', 'Clinic'), ('attendance', 'Attendance'), ('payment', 'Payment'), ('academic', 'Academic')], default='general', max_length=20)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('urgent', 'Urgent')], default='normal', max_length=10)),
                ('is_pinned', models.BooleanField(default=False)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('requires_approval', models.BooleanField(default=False)),
                ('is_approved', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('recipient', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='received_messages', to=settings.AUTH_USER_MODEL)),
                ('sender', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_messages', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='messages', to='core.student')),
            ],
            options={
                'verbose_name': 'Message',
                'verbose_name_plural': 'Messages',
                'ordering': ['-is_pinned', '-created_at'],
                'indexes': [
                    models.Index(fields=['recipient', 'is_read'], name='core_msg_recipient_read_idx'),
                    models.Index(fields=['sender', 'created_at'], name='core_msg_sender_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notification_type', models.CharField(choices=[('INFO', 'Information'), ('WARNING', 'Warning'), ('MESSAGE', 'Message'), ('CLINIC', 'Clinic'), ('WEEKLY_REPORT', 'Weekly Report'), ('SECURITY', 'Security')], default='INFO', max_length=20)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('link', models.CharField(blank=True, max_length=500)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['recipient', 'is_read', 'created_at'], name='core_notif_recipient_read_idx'),
                    models.Index(fields=['created_at'], name='core_notif_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WeeklyReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('week_start', models.DateField()),
                ('week_end', models.DateField(blank=True)),
                ('report_type', models.CharField(choices=[('teaching', 'Teaching'), ('administrative', 'Administrative'), ('clinic', 'Clinic'), ('general', 'General')], default='general', max_length=20)),
                ('content', models.TextField()),
                ('achievements', models.JSONField(blank=True, default=list)),
                ('challenges', models.JSONField(blank=True, default=list)),
                ('next_week_goals', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('submitted', 'Submitted'), ('reviewed', 'Reviewed')], default='submitted', max_length=20)),
                ('submitted_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='weekly_reports', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Weekly Report',
                'verbose_name_plural': 'Weekly Reports',
                'ordering': ['-week_start', '-submitted_at'],
                'indexes': [models.Index(fields=['user', 'week_start'], name='core_weekly_user_week_idx')],
            },
        ),
    ]
