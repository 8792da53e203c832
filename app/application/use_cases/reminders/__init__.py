"""Use cases for scheduled event reminders."""

from .plan_event_reminders import PlannedReminder, plan_event_reminders, reminder_message
from .run_reminder_sweep import run_reminder_sweep

__all__ = [
    "PlannedReminder",
    "plan_event_reminders",
    "reminder_message",
    "run_reminder_sweep",
]
