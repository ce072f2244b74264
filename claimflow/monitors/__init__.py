# Monitors module - mutation coordination and post-commit hooks
from .hooks import AuditRecorder, NotificationDispatcher
from .process_monitor import ProcessMonitor

__all__ = ["AuditRecorder", "NotificationDispatcher", "ProcessMonitor"]
