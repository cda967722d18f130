"""Calendar data model and date/time helpers for calendar_engine."""
