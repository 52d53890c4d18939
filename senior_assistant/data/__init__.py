"""
Session-local records for the Senior Assistant
"""

from .models import Recipe, Message, Reminder, MedicationRequest, Appointment, Hospital, Activity
from .records import RecordBook

__all__ = [
    'Recipe',
    'Message',
    'Reminder',
    'MedicationRequest',
    'Appointment',
    'Hospital',
    'Activity',
    'RecordBook'
]
