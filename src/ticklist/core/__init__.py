"""
Core wiring.

Components:
- ports.py: Protocols the task API depends on (TaskRepo)
- state.py: AppState passed to command handlers
"""
