"""
Timetable management models.
"""
from datetime import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from core.models.base import CLASS_CHOICES, DAY_CHOICES, DAY_ORDER


class TimetableEntry(models.Model):
    day = models.CharField(max_length=10, choices=DAY_CHOICES)
    day_index = models.PositiveSmallIntegerField(default=0, editable=False)
    start_time = models.TimeField()
    end_time = models.TimeField()
    subject = models.CharField(max_length=100)
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='timetable_entries'
    )
    class_name = models.CharField(max_length=20, choices=CLASS_CHOICES)
    stream_name = models.CharField(max_length=30, blank=True)
    room = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['day_index', 'start_time']
        verbose_name = 'Timetable Entry'
        verbose_name_plural = 'Timetable Entries'
        indexes = [
            models.Index(fields=['class_name', 'stream_name', 'day_index'], name='core_tt_class_stream_day_idx'),
            models.Index(fields=['teacher', 'day_index'], name='core_tt_teacher_day_idx'),
        ]

    def __str__(self):
        return (
            f"{self.day} {self.start_time:%H:%M}-{self.end_time:%H:%M} "
            f"{self.subject} ({self.class_name} {self.stream_name})"
        )

    @property
    def duration_minutes(self):
        start = datetime.combine(datetime.min, self.start_time)
        end = datetime.combine(datetime.min, self.end_time)
        return int((end - start).total_seconds() // 60)

    def overlapping_entries(self):
        """Entries on the same day whose time range intersects this one."""
        queryset = TimetableEntry.objects.filter(
            day=self.day,
            start_time__lt=self.end_time,
            end_time__gt=self.start_time,
        )
        if self.pk:
            queryset = queryset.exclude(pk=self.pk)
        return queryset

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({'end_time': 'End time must be after start time.'})

        if not (self.day and self.start_time and self.end_time):
            return

        overlapping = self.overlapping_entries()
        if self.teacher_id and overlapping.filter(teacher_id=self.teacher_id).exists():
            raise ValidationError({
                'teacher': f'Teacher already has a lesson on {self.day} during this time.'
            })
        if overlapping.filter(class_name=self.class_name, stream_name=self.stream_name).exists():
            label = f"{self.class_name} {self.stream_name}".strip()
            raise ValidationError({
                'start_time': f'{label} already has a lesson on {self.day} during this time.'
            })

    def save(self, *args, **kwargs):
        self.day_index = DAY_ORDER.get(self.day, 0)
        super().save(*args, **kwargs)
