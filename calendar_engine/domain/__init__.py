"""Recurrence, conflict, series and reminder logic for calendar_engine."""
