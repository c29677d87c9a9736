from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

import httpx

from .change_log import ChangeLog
from .config import TweakConfig
from .http_client import HostClient
from .page import Page
from .poller import InvalidationPoller
from .sync_client import ValueSyncClient

logger = logging.getLogger(__name__)


class TweakSession:
    """Owns the client state for one page: change log, sync client, poller.

    State is built once per page load. When the host invalidates the tunable
    set the page is reloaded and every piece of state is rebuilt from scratch.
    """

    def __init__(
        self,
        config: TweakConfig,
        page: Page,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        on_reload: Callable[[int], None] | None = None,
    ) -> None:
        self.config = config
        self.page = page
        self.host = HostClient(
            config.base_url,
            timeout_s=config.request_timeout_s,
            transport=transport,
        )
        self.on_reload = on_reload
        self.generation = 0
        self.change_log = ChangeLog(config.scope_separator)
        self.sync_client = self._build_sync_client()
        self.poller: InvalidationPoller | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._closed = False

    def _build_sync_client(self) -> ValueSyncClient:
        return ValueSyncClient(
            self.host,
            self.page,
            self.change_log,
            separator=self.config.scope_separator,
            label_suffix=self.config.label_suffix,
            output_suffix=self.config.output_suffix,
            status_element=self.config.status_element,
        )

    def start(self, *, poll: bool = True) -> None:
        if poll:
            self._start_poller()

    def _start_poller(self) -> None:
        self.poller = InvalidationPoller(
            self.host,
            self.page,
            self._invalidate,
            interval_s=self.config.poll_interval_s,
            status_element=self.config.status_element,
        )
        self._poll_task = asyncio.get_running_loop().create_task(
            self.poller.run(), name="invalidation-poller"
        )

    def apply(self, source: str, value: str, kind: str) -> None:
        self.sync_client.apply(source, value, kind)

    def _invalidate(self) -> None:
        # Requests still in flight belong to the old page: they finish but no longer report.
        if self.poller is not None:
            self.poller.stop()
        self.sync_client.discard()
        self.page.reload()
        self.generation += 1
        self.change_log = ChangeLog(self.config.scope_separator)
        self.sync_client = self._build_sync_client()
        logger.info("session state discarded", extra={"generation": self.generation})
        if not self._closed:
            self._start_poller()
        if self.on_reload is not None:
            self.on_reload(self.generation)

    async def drain(self) -> None:
        await self.sync_client.drain()

    async def close(self) -> None:
        self._closed = True
        if self.poller is not None:
            self.poller.stop()
        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
        await self.host.aclose()

    async def __aenter__(self) -> TweakSession:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
