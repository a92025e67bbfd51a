"""Core plumbing: app context, ports, change notifications, delete confirmation."""
