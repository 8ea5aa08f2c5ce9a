"""
Lifecycle notifications.

- events.py: EventKind
- bus.py: observer registry with fault-isolated synchronous dispatch
- observers.py: logging, desktop and e-mail observers
"""
