# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBELL_APP_NAME": "App display name, also used as the reminder title (default: taskbell).",
    "TASKBELL_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TASKBELL_CONSOLE_ENABLED": "Enable the console REPL (true/false, default: true).",
    # Polling / nagging
    "TASKBELL_POLL_INTERVAL_SECONDS": "How often tasks are re-read and rules re-evaluated (default: 60).",
    "TASKBELL_NAG_INTERVAL_SECONDS": "Minimum time between two nag reminders (default: 300).",
    # Paths (gitignored)
    "TASKBELL_DATA_DIR": "Local data directory, also holds taskbell.log (default: .local/taskbell).",
    "TASKBELL_RULES_PATH": "Rules JSON (default: <data_dir>/rules.json). Reload with /reload.",
    "TASKBELL_TASKS_PATH": "Tasks JSON read by the local task source (default: <data_dir>/tasks.json).",
}

EXAMPLE_RULES = {
    "customStateRules": [
        {
            "condition": {"numberMarkedCurrent": 0, "hours": "9-17", "daysOfWeek": "mon-fri"},
            "resultingStatus": "warning",
            "resultingMessage": "Pick a current task",
        },
        {
            "condition": {"currentTaskIsOverdue": True},
            "resultingStatus": "error",
            "resultingMessage": "Your current task is overdue",
        },
    ],
    "naggingConditions": [
        {"numberMarkedCurrent": 0, "hours": "9-17", "daysOfWeek": "mon-fri"},
        {"numberOverdueWithTimeNotMarkedCurrent": ">0"},
    ],
    "downtimeConditions": [
        {"hours": "12", "minutes": "0-29"},
        {"daysOfWeek": "sat,sun"},
    ],
}
