from __future__ import annotations

import asyncio
import logging

import httpx

from . import declaration, qualified_name
from .change_log import ChangeLog
from .http_client import HostClient
from .page import Page
from .status import STATUS_ELEMENT_ID, report_transport_error
from .tasks import spawn

logger = logging.getLogger(__name__)

LABEL_SUFFIX = "_label"
OUTPUT_SUFFIX = "_output"


class ValueSyncClient:
    """Propagates one edit to the label, the host and the group's text view.

    The change log is updated at call time, before the request completes, so
    the latest edit of a key always wins regardless of response order.
    """

    def __init__(
        self,
        host: HostClient,
        page: Page,
        change_log: ChangeLog,
        *,
        separator: str = qualified_name.DEFAULT_SEPARATOR,
        label_suffix: str = LABEL_SUFFIX,
        output_suffix: str = OUTPUT_SUFFIX,
        status_element: str = STATUS_ELEMENT_ID,
    ) -> None:
        self.host = host
        self.page = page
        self.change_log = change_log
        self.separator = separator
        self.label_suffix = label_suffix
        self.output_suffix = output_suffix
        self.status_element = status_element
        self.discarded = False
        self.pending: set[asyncio.Task[None]] = set()

    def output_id(self, group: str) -> str:
        return f"{group}{self.output_suffix}"

    def apply(self, source: str, value: str, kind: str) -> None:
        if not source:
            raise ValueError("missing qualified name")
        kind_name = declaration.normalize_value_kind(kind)

        label = self.page.get_element(f"{source}{self.label_suffix}")
        if label is not None:
            label.set_text(value)

        spawn(self._send(source, value, kind_name), self.pending, name=f"set:{source}")

        name = qualified_name.parse(source, self.separator)
        line = declaration.render(name.variable, value, kind_name)
        self.change_log.record(source, line)
        block = self.change_log.render_group(name.group)
        output = self.page.get_element(self.output_id(name.group))
        if output is None:
            logger.debug("no output element for group", extra={"group": name.group})
            return
        output.set_text(block)

    async def _send(self, source: str, value: str, kind: str) -> None:
        try:
            await self.host.post_update(kind, source, value)
        except httpx.RequestError as exc:
            if self.discarded:
                logger.debug("dropping failure from discarded page", extra={"key": source})
                return
            report_transport_error(
                self.page,
                exc,
                action=f"set {source}",
                element_id=self.status_element,
            )

    def discard(self) -> None:
        """Detach from the page; requests still in flight stop reporting."""

        self.discarded = True

    async def drain(self) -> None:
        """Wait for the requests issued so far; used before a one-shot exit."""

        if self.pending:
            await asyncio.gather(*list(self.pending), return_exceptions=True)
