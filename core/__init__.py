"""
School records: students, clinic, staff, timetables, results and messaging.
"""
