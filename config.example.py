# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "OCEAN_APP_NAME": "App display name (default: Ocean Tasks).",
    "OCEAN_LOG_LEVEL": "Console logging level (default: WARNING).",
    "OCEAN_LOG_TO_FILE": "Write full DEBUG logs to <data_dir>/ocean.log (true/false, default: true).",
    # Paths (gitignored)
    "OCEAN_DATA_DIR": "Local data directory (default: .local/ocean).",
    "OCEAN_STORAGE_PATH": "Key-value SQLite path (default: <data_dir>/storage.sqlite3).",
    # Storage keys
    "OCEAN_TASKS_KEY": "Key holding the serialized task list (default: tasks).",
    "OCEAN_THEME_KEY": "Key holding the theme preference (default: theme).",
}
