"""ticklist: a personal task tracker with recurring tasks and task dependencies."""

__version__ = "0.4.0"
