"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, Priority, Recurrence, filters)
- task_store.py: JSON file storage (load_all / save_all)
- dependencies.py: dependency graph validation and blocked state
- recurrence.py: next-occurrence dates and lineage deduplication
- validation.py, tag_normalizer.py, date_parser.py: input handling
- task_api.py: one load -> mutate -> save workflow per command
"""
