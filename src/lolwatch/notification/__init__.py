"""Grouped game notifications."""

from lolwatch.notification.discord import DiscordNotifier, LogNotifier, Notifier
from lolwatch.notification.processor import NotificationProcessor, ProcessingReport

__all__ = ["DiscordNotifier", "LogNotifier", "NotificationProcessor", "Notifier", "ProcessingReport"]
