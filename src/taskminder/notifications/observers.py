# src/taskminder/notifications/observers.py

"""
Concrete observers.

- LoggingObserver: writes every event to the application log.
- SystemNotifier: desktop notification (notify-send / osascript), console fallback.
- EmailNotifier: mails completion and overdue notices through a Mailer port.
"""

from __future__ import annotations

import logging
import shutil
import smtplib
import subprocess
import sys
from collections.abc import Callable
from email.message import EmailMessage

from ..core.ports import Mailer
from ..tasks.task_models import Task
from .events import EventKind

logger = logging.getLogger(__name__)


class LoggingObserver:
    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def receive(self, task: Task, event_kind: EventKind) -> None:
        logger.log(
            self.level,
            "Task %s: '%s' id=%s owner=%s",
            event_kind.value,
            task.title,
            task.id,
            task.owner_id,
        )


def detect_platform(platform: str | None = None) -> str:
    p = (platform or sys.platform).lower()
    if p.startswith("darwin"):
        return "macos"
    if p.startswith("linux"):
        return "linux"
    if p.startswith(("win", "cygwin", "msys")):
        return "windows"
    return "unknown"


_URGENCY = {
    EventKind.CREATED: "low",
    EventKind.OVERDUE_CHECK: "critical",
}


class SystemNotifier:
    """
    Pops a desktop notification per lifecycle event.

    Overdue / due-soon events for already completed tasks are ignored.
    If the platform tool is missing or fails, the message goes to `emit`.
    """

    def __init__(
        self,
        *,
        platform: str | None = None,
        emit: Callable[[str], None] = print,
        timeout_seconds: float = 5.0,
    ) -> None:
        self.platform = detect_platform(platform)
        self.emit = emit
        self.timeout_seconds = timeout_seconds

    def receive(self, task: Task, event_kind: EventKind) -> None:
        built = self.build_message(task, event_kind)
        if built is None:
            return
        title, message = built
        self.notify(title, message, _URGENCY.get(event_kind, "normal"))

    @staticmethod
    def build_message(task: Task, event_kind: EventKind) -> tuple[str, str] | None:
        due = task.due_date.isoformat() if task.due_date else "-"

        if event_kind is EventKind.COMPLETED:
            at = task.completed_at.strftime("%Y-%m-%d %H:%M") if task.completed_at else "now"
            return "Task Completed", f"Great job! Your task '{task.title}' was completed at {at}."
        if event_kind is EventKind.REOPENED:
            return "Task Reopened", f"Task '{task.title}' has been marked as pending again."
        if event_kind is EventKind.CREATED:
            return "Task Created", f"New task '{task.title}' has been created."
        if event_kind is EventKind.UPDATED:
            return "Task Updated", f"Task '{task.title}' has been updated."
        if event_kind is EventKind.DELETED:
            return "Task Deleted", f"Task '{task.title}' has been deleted."
        if event_kind is EventKind.OVERDUE_CHECK:
            if task.is_completed:
                return None
            return "Task Overdue!", f"Your task '{task.title}' was due on {due} and is now overdue!"
        if event_kind is EventKind.DUE_SOON:
            if task.is_completed:
                return None
            return "Task Due Soon", f"Your task '{task.title}' is due on {due}."

        logger.warning("Unknown event type: %s for task '%s'", event_kind, task.title)
        return None

    def _command(self, title: str, message: str, urgency: str) -> list[str] | None:
        if self.platform == "linux" and shutil.which("notify-send"):
            return ["notify-send", "-u", urgency, title, message]
        if self.platform == "macos" and shutil.which("osascript"):
            script = f"display notification {_applescript_str(message)} with title {_applescript_str(title)}"
            return ["osascript", "-e", script]
        return None

    def notify(self, title: str, message: str, urgency: str = "normal") -> None:
        cmd = self._command(title, message, urgency)
        if cmd is not None:
            try:
                subprocess.run(cmd, check=True, timeout=self.timeout_seconds, capture_output=True)
                logger.info("%s notification sent: %s", self.platform, title)
                return
            except (OSError, subprocess.SubprocessError):
                logger.error("Desktop notification failed; falling back to console", exc_info=True)

        self.emit(f"[{urgency.upper()}] {title}: {message}")
        logger.debug("Console notification sent: %s", title)


def _applescript_str(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class LogMailer:
    """Mailer that only logs the message. Default when SMTP is not configured."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, *, to: str, subject: str, body: str) -> None:
        self.sent.append((to, subject, body))
        logger.info("Simulated email to=%s subject=%r", to, subject)


class SmtpMailer:
    def __init__(self, host: str, port: int = 25, *, sender: str, timeout_seconds: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.timeout_seconds = timeout_seconds

    def send(self, *, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as smtp:
            smtp.send_message(msg)
        logger.info("Email sent to=%s subject=%r", to, subject)


class EmailNotifier:
    """Emails the owner when a task is completed or found overdue."""

    def __init__(self, mailer: Mailer, *, address_template: str = "{owner_id}@localhost") -> None:
        self.mailer = mailer
        self.address_template = address_template

    def address_for(self, owner_id: str) -> str:
        return self.address_template.format(owner_id=owner_id)

    def receive(self, task: Task, event_kind: EventKind) -> None:
        if event_kind is EventKind.COMPLETED:
            at = task.completed_at.strftime("%Y-%m-%d %H:%M:%S") if task.completed_at else "now"
            self.mailer.send(
                to=self.address_for(task.owner_id),
                subject=f"Task Completed: {task.title}",
                body=f"Great job! Your task '{task.title}' (ID: {task.id}) was marked as completed at {at}.",
            )
        elif event_kind is EventKind.OVERDUE_CHECK and not task.is_completed:
            due = task.due_date.isoformat() if task.due_date else "-"
            self.mailer.send(
                to=self.address_for(task.owner_id),
                subject=f"Urgent: Task Overdue! - {task.title}",
                body=f"Your task '{task.title}' (ID: {task.id}) was due on {due} and is now overdue!",
            )
        else:
            logger.debug("EmailNotifier ignores %s for task id=%s", event_kind.value, task.id)
