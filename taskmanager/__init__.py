"""Task Manager API: user accounts and personal task lists over HTTP."""

__version__ = "1.0.0"
