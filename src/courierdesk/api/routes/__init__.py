"""Route group exports."""

from . import courier, files, health, notifications, waybills, webhooks

__all__ = ["courier", "files", "health", "notifications", "waybills", "webhooks"]
