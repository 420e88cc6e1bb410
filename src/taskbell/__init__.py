"""taskbell: current-task status and reminders."""

__version__ = "0.1.0"
