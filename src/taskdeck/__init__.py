"""
taskdeck: calendar, daily checklist, task list and completion analytics.

Subpackages:
- storage: local key-value persistence (SQLite)
- tasks: task engine and daily checklist engine
- analytics: completion split + last-days histogram
- core: app context, change notifications, delete confirmation
- cli: console front-end
"""
