# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file)
by taskminder.config.Settings.from_env(). Do NOT commit real mail credentials; keep them in
.env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKMINDER_APP_NAME": "App display name (default: taskminder).",
    "TASKMINDER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKMINDER_DATA_DIR": "Local data directory for the database and log (default: .local/taskminder).",
    "TASKMINDER_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Engine
    "TASKMINDER_OWNER": "Owner selected at startup (default: $USER / $USERNAME, else 'local').",
    "TASKMINDER_TIMEZONE": "IANA zone that decides 'today' and CSV timestamps (default: system zone).",
    "TASKMINDER_DEFAULT_SORT": "default | due_date | priority (unknown names use default).",
    "TASKMINDER_DUE_SOON_DAYS": "Due-soon window in days after today (default: 1).",
    "TASKMINDER_EXPORT_FORMAT": "Format used when a path has no suffix: csv | json (default: csv).",
    # Notifications
    "TASKMINDER_NOTIFY_SYSTEM": "Desktop notifications via notify-send/osascript (true/false).",
    "TASKMINDER_NOTIFY_EMAIL": "Email on completion / overdue (true/false).",
    "TASKMINDER_SMTP_HOST": "SMTP host; when empty, emails are only logged.",
    "TASKMINDER_SMTP_PORT": "SMTP port (default: 25).",
    "TASKMINDER_MAIL_FROM": "Sender address (default: taskminder@localhost).",
    "TASKMINDER_MAIL_TO_TEMPLATE": "Recipient template, {owner_id} is substituted (default: {owner_id}@localhost).",
}
