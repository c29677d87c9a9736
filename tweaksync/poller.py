from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Literal

import httpx

from .http_client import REFRESH_TOKEN, HostClient
from .page import Page
from .status import STATUS_ELEMENT_ID, report_transport_error
from .tasks import spawn

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 1.0

PollState = Literal["idle", "checking"]


class InvalidationPoller:
    """Asks the host on a fixed interval whether the tunable set is still valid.

    A `refresh` answer stops polling and fires `on_invalidate` once. Failures
    are reported and the next tick proceeds as usual. Checks that outlive a
    tick are allowed to overlap.
    """

    def __init__(
        self,
        host: HostClient,
        page: Page,
        on_invalidate: Callable[[], None],
        *,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
        status_element: str = STATUS_ELEMENT_ID,
    ) -> None:
        self.host = host
        self.page = page
        self.on_invalidate = on_invalidate
        self.interval_s = interval_s
        self.status_element = status_element
        self.stopped = False
        self.invalidated = False
        self.pending: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> PollState:
        return "checking" if self.pending else "idle"

    def tick(self) -> asyncio.Task[None] | None:
        if self.stopped:
            return None
        return spawn(self._check(), self.pending, name="should_refresh")

    async def _check(self) -> None:
        try:
            body = await self.host.should_refresh()
        except httpx.RequestError as exc:
            if self.stopped:
                return
            report_transport_error(
                self.page,
                exc,
                action="should_refresh",
                element_id=self.status_element,
            )
            return
        if body != REFRESH_TOKEN or self.stopped:
            return
        self.invalidated = True
        self.stopped = True
        logger.info("reloading page")
        self.on_invalidate()

    async def run(self) -> None:
        while not self.stopped:
            await asyncio.sleep(self.interval_s)
            self.tick()

    def stop(self) -> None:
        self.stopped = True
