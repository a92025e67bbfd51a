# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Copy the values you need into .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "File log level (default: INFO).",
    # Paths (gitignored)
    "TASKDECK_DATA_DIR": "Local data directory, also holds taskdeck.log (default: .local/taskdeck).",
    "TASKDECK_STORE_DB_PATH": "Key-value store SQLite path (default: <data_dir>/store.sqlite3).",
    # Behavior
    "TASKDECK_STRICT_EDIT_TITLE": "Reject blank titles when editing a task (default: false).",
    "TASKDECK_CONSOLE_ENABLED": "Start the interactive console (default: true).",
}
