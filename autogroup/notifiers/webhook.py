from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

import httpx

from .base import BaseNotifier
from .message import EventMessage


MAX_ATTEMPTS = 3


@dataclass
class WebhookSettings:
    url: str
    headers: dict[str, str]
    timeout_seconds: int
    user_agent: str
    operations: frozenset[str] | None = None


class WebhookNotifier(BaseNotifier):
    def __init__(self, settings: WebhookSettings) -> None:
        self._settings = settings
        self._logger = logging.getLogger(__name__)

    def accepts(self, message: EventMessage) -> bool:
        return self._settings.operations is None or message.operation in self._settings.operations

    async def send(self, message: EventMessage) -> bool:
        if not self.accepts(message):
            return True
        headers = {"User-Agent": self._settings.user_agent}
        headers.update(self._settings.headers)

        async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
            for _ in range(MAX_ATTEMPTS):
                response = await client.post(
                    self._settings.url, json=message.as_json(), headers=headers
                )
                if response.status_code == 429:
                    retry_after = _retry_after(response)
                    self._logger.warning("Webhook rate limit hit, sleeping %.2fs", retry_after)
                    await asyncio.sleep(retry_after)
                    continue
                if 200 <= response.status_code < 300:
                    return True
                self._logger.error(
                    "Webhook failed for %s with status %s", message.operation, response.status_code
                )
                return False
            return False


def _retry_after(response: httpx.Response) -> float:
    value = response.headers.get("Retry-After")
    try:
        return max(float(value), 0.0) if value is not None else 1.0
    except ValueError:
        return 1.0
