"""Best-effort cache refresh notifications for regenerated manifests."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from foliogen.config.models import WebhookSettings
from foliogen.manifest.models import utc_timestamp

LOGGER = logging.getLogger(__name__)

WEBHOOK_SOURCE = "manifest-generator"
SECRET_HEADER = "x-webhook-secret"


def build_url(settings: WebhookSettings, portfolio_type: str) -> str:
    """Return the refresh endpoint for ``portfolio_type``.

    An explicit URL wins: its ``{type}`` placeholder is substituted, otherwise
    ``/refresh/<type>`` is appended unless the URL already targets a refresh
    route. Without an explicit URL the configured base is used.
    """
    if settings.url:
        if "{type}" in settings.url:
            return settings.url.replace("{type}", portfolio_type)
        if "/refresh/" not in settings.url:
            return f"{settings.url.rstrip('/')}/refresh/{portfolio_type}"
        return settings.url
    return f"{settings.base.rstrip('/')}/refresh/{portfolio_type}"


class WebhookNotifier:
    """POST a small JSON notice after a manifest write decision."""

    def __init__(self, settings: WebhookSettings, client: Optional[httpx.Client] = None) -> None:
        """Initialize the notifier.

        Args:
            settings: Webhook configuration.
            client: HTTP client to use; one is created per call when omitted.
        """
        self.settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return not self.settings.disabled

    def notify(self, portfolio_type: str, details: Mapping[str, Any] | None = None) -> bool:
        """Send the refresh notice for ``portfolio_type``.

        Failures of any kind are logged as warnings and reported as ``False``.

        Returns:
            bool: True when the endpoint acknowledged with a 2xx response.
        """
        if not self.enabled:
            LOGGER.info("Manifest webhook disabled; skipping notify for %s.", portfolio_type)
            return False

        url = build_url(self.settings, portfolio_type)
        payload: dict[str, Any] = {
            "type": portfolio_type,
            "source": WEBHOOK_SOURCE,
            "timestamp": utc_timestamp(),
        }
        payload.update(details or {})
        headers = {"Content-Type": "application/json"}
        if self.settings.secret:
            headers[SECRET_HEADER] = self.settings.secret

        LOGGER.info("Notifying manifest webhook: %s", url)
        try:
            response = self._post(url, payload, headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.warning("Failed to notify webhook for %s: %s", portfolio_type, exc)
            return False

        if not response.is_success:
            LOGGER.warning("Webhook responded %s: %s", response.status_code, response.text or "(no body)")
            return False
        LOGGER.info("Webhook notified (%s): %s", portfolio_type, response.status_code)
        return True

    def _post(self, url: str, payload: Mapping[str, Any], headers: Mapping[str, str]) -> httpx.Response:
        timeout = self.settings.timeout_seconds
        if self._client is not None:
            return self._client.post(url, json=payload, headers=headers, timeout=timeout)
        with httpx.Client(timeout=timeout) as client:
            return client.post(url, json=payload, headers=headers)


__all__ = ["SECRET_HEADER", "WEBHOOK_SOURCE", "WebhookNotifier", "build_url"]
