"""Delivery targets for form submissions.

A strategy is chosen once when the application starts and is then used for
every submission of that form:

* ``WebhookStrategy`` posts the payload to an automation webhook (Zapier,
  Make, n8n and similar).
* ``SheetProxyStrategy`` posts it to a Google Apps Script endpoint that
  appends a row to the spreadsheet.
* ``DevLogStrategy`` only logs the payload; it is available in dev mode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from dabs_site.clients.forwarder import JsonForwarder
from dabs_site.services.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookStrategy:
    url: str
    kind: str = "webhook"


@dataclass(frozen=True)
class SheetProxyStrategy:
    endpoint: str
    kind: str = "sheet_proxy"


@dataclass(frozen=True)
class DevLogStrategy:
    kind: str = "dev_log"


SubmissionStrategy = Union[WebhookStrategy, SheetProxyStrategy, DevLogStrategy]


def select_strategy(
    *,
    webhook_url: Optional[Any] = None,
    script_url: Optional[Any] = None,
    dev_mode: bool = False,
    form: str = "form",
) -> SubmissionStrategy:
    """Pick the delivery target for ``form``; the webhook wins over the script."""

    if webhook_url:
        strategy: SubmissionStrategy = WebhookStrategy(url=str(webhook_url))
    elif script_url:
        strategy = SheetProxyStrategy(endpoint=str(script_url))
    elif dev_mode:
        strategy = DevLogStrategy()
    else:
        logger.error("No submission target configured for %s", form)
        raise ConfigurationError("Server not configured")
    logger.info("Submissions for %s use the %s strategy", form, strategy.kind)
    return strategy


class SubmissionDispatcher:
    """Delivers payloads according to a fixed strategy."""

    def __init__(self, strategy: SubmissionStrategy, forwarder: JsonForwarder, *, form: str = "form") -> None:
        self.strategy = strategy
        self._forwarder = forwarder
        self._form = form

    async def deliver(self, payload: Dict[str, Any], *, preview: Optional[str] = None) -> None:
        strategy = self.strategy
        if isinstance(strategy, WebhookStrategy):
            await self._forwarder.post(strategy.url, payload)
        elif isinstance(strategy, SheetProxyStrategy):
            await self._forwarder.post(strategy.endpoint, payload)
        else:
            logger.info("%s submission (dev mode): %s", self._form, payload)
            if preview:
                logger.info("%s preview:\n%s", self._form, preview)
