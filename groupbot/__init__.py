"""Group chat bot features: reminders, group management, draws and daily amusements."""

__version__ = "0.1.0"