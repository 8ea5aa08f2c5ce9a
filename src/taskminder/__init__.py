"""
taskminder: per-owner task records with ordering, filtering and lifecycle notifications.

Packages:
- core/: errors, clock, ports (Protocols), AppState
- tasks/: Task model, ordering, filters, SQLite store, service, export/import codecs
- notifications/: event kinds, notification bus, observers
- cli/ + connectors/: console front end
"""

__version__ = "0.1.0"
