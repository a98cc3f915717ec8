"""Outbound notifications."""

from .webhook import WebhookNotifier, build_url

__all__ = ["WebhookNotifier", "build_url"]
