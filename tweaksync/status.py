from __future__ import annotations

import logging

from .page import Page

logger = logging.getLogger(__name__)

STATUS_ELEMENT_ID = "status"


def describe_error(exc: BaseException, *, limit: int = 4) -> str:
    parts: list[str] = []
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen and len(parts) < limit:
        seen.add(id(cur))
        message = str(cur)
        parts.append(f"{cur.__class__.__name__}: {message}" if message else cur.__class__.__name__)
        cur = cur.__cause__
    return " | ".join(parts)


def report_transport_error(
    page: Page,
    exc: BaseException,
    *,
    action: str,
    element_id: str = STATUS_ELEMENT_ID,
) -> str:
    """Write a transport failure into the shared status element and log it."""

    message = f"HTTP Error: {describe_error(exc)}"
    logger.warning(message, extra={"action": action})
    element = page.get_element(element_id)
    if element is not None:
        element.set_text(message)
    return message
