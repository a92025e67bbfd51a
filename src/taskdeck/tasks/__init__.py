"""
Task subsystem.

Components:
- models.py: data structures (Task, DailyTask, Priority, TaskFilter)
- task_engine.py: general task list (priority, due date, completion timestamps)
- daily_engine.py: bounded daily checklist with the once-per-day reset sweep
"""
