from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class Element(Protocol):
    id: str
    text: str

    def set_text(self, text: str) -> None: ...

    def select_all(self) -> str: ...


class Page(Protocol):
    def get_element(self, element_id: str) -> Element | None: ...

    def reload(self) -> None: ...


@dataclass
class MemoryElement:
    id: str
    text: str = ""
    initial_text: str = ""
    selected: bool = False

    def set_text(self, text: str) -> None:
        self.text = text
        self.selected = False

    def select_all(self) -> str:
        """Select the full contents for copy-out and return them."""

        self.selected = True
        return self.text


class MemoryPage:
    """In-process page: elements addressed by id, plus a reload hook.

    A reload restores every element to the text it was registered with, which
    is what the host would serve on a fresh page load.
    """

    def __init__(self, *, auto_create: bool = False) -> None:
        self.auto_create = auto_create
        self.reload_count = 0
        self._elements: dict[str, MemoryElement] = {}

    def add(self, element_id: str, text: str = "") -> MemoryElement:
        element = MemoryElement(id=element_id, text=text, initial_text=text)
        self._elements[element_id] = element
        return element

    def get_element(self, element_id: str) -> MemoryElement | None:
        element = self._elements.get(element_id)
        if element is None and self.auto_create:
            element = self.add(element_id)
        return element

    def text_of(self, element_id: str) -> str | None:
        element = self._elements.get(element_id)
        return element.text if element is not None else None

    def element_ids(self) -> list[str]:
        return list(self._elements)

    def reload(self) -> None:
        self.reload_count += 1
        logger.info("page reloaded", extra={"reload_count": self.reload_count})
        for element in self._elements.values():
            element.text = element.initial_text
            element.selected = False
