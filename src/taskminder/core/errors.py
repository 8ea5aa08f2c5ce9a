# src/taskminder/core/errors.py

"""
Error taxonomy for the task engine.

Expected failures (validation, lookups) are typed and surface unchanged.
I/O failures are wrapped in FileError with the original exception chained.
"""

from __future__ import annotations


class TaskManagerError(Exception):
    """Base class for every error raised by taskminder."""

    default_message = "An unknown task manager error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ValidationError(TaskManagerError, ValueError):
    default_message = "Invalid input provided."


class NotFoundError(TaskManagerError, LookupError):
    default_message = "Task not found."


class DuplicateError(TaskManagerError):
    default_message = "Record already exists."


class UnsupportedFormatError(TaskManagerError):
    default_message = "Unsupported file format."


class FileError(TaskManagerError):
    default_message = "A file operation error occurred."


class ConflictError(TaskManagerError):
    """The stored row changed between our read and our write."""

    default_message = "Task was modified concurrently."
