# core/models/base.py
"""
Constants and upload path helpers shared by the school record models.
"""

import os
from datetime import datetime

# ============================================================================
# CONSTANTS
# ============================================================================

GENDER_CHOICES = [
    ('M', 'Male'),
    ('F', 'Female'),
]

CLASS_CHOICES = [
    ('Senior 1', 'Senior 1'),
    ('Senior 2', 'Senior 2'),
    ('Senior 3', 'Senior 3'),
    ('Senior 4', 'Senior 4'),
    ('Senior 5', 'Senior 5'),
    ('Senior 6', 'Senior 6'),
]

# O-level classes run lettered streams, A-level classes run combinations
CLASS_STREAMS = {
    'Senior 1': ['A', 'B', 'C'],
    'Senior 2': ['A', 'B', 'C'],
    'Senior 3': ['A', 'B', 'C'],
    'Senior 4': ['A', 'B', 'C'],
    'Senior 5': ['Arts', 'Sciences'],
    'Senior 6': ['Arts', 'Sciences'],
}

O_LEVEL_SUBJECTS = [
    'English', 'Mathematics', 'Physics', 'Chemistry', 'Biology',
    'History', 'Geography', 'Christian Religious Education', 'Agriculture',
    'Entrepreneurship', 'ICT',
]

A_LEVEL_SUBJECTS = [
    'General Paper', 'Mathematics', 'Physics', 'Chemistry', 'Biology',
    'Economics', 'History', 'Geography', 'Literature', 'Divinity',
    'Sub-Mathematics', 'Sub-ICT',
]

CLASS_SUBJECTS = {
    class_name: (O_LEVEL_SUBJECTS if class_name in ('Senior 1', 'Senior 2', 'Senior 3', 'Senior 4') else A_LEVEL_SUBJECTS)
    for class_name, _ in CLASS_CHOICES
}

RESIDENCE_CHOICES = [
    ('Day', 'Day'),
    ('Boarding', 'Boarding'),
]

TERM_CHOICES = [
    ('Term 1', 'Term 1'),
    ('Term 2', 'Term 2'),
    ('Term 3', 'Term 3'),
]

DAY_CHOICES = [
    ('Monday', 'Monday'),
    ('Tuesday', 'Tuesday'),
    ('Wednesday', 'Wednesday'),
    ('Thursday', 'Thursday'),
    ('Friday', 'Friday'),
]

DAY_ORDER = {day: index for index, (day, _) in enumerate(DAY_CHOICES)}

# ============================================================================
# UPLOAD PATH FUNCTIONS
# ============================================================================

def staff_document_path(instance, filename):
    """Generate upload path for staff CVs and passport photos."""
    ext = filename.split('.')[-1]
    filename = f"staff_{instance.pk or 'new'}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{ext}"
    return os.path.join('staff', filename)
