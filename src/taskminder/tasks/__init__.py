"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority) and field coercion
- task_ordering.py: default comparator + named sort strategies
- task_filters.py: composable filter strategies
- task_store.py: SQLite-backed repository with optimistic versioning
- task_io.py: CSV / JSON export-import codecs
- task_service.py: owner-scoped use cases that tie the above together
"""
