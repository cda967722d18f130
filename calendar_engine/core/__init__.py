"""Configuration, clock and timer plumbing for calendar_engine."""
