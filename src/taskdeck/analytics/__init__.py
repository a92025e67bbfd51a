"""Completion analytics derived from the task list (read-only)."""
