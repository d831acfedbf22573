"""
Parsed-document capability interface.

The exporter only needs a handful of operations on rendered HTML:
parse, query by CSS selector, read/write attributes, replace or remove
elements, and serialize.  ``HtmlDocument`` names exactly those, and
``SoupDocument`` provides them with BeautifulSoup.  Element handles are
opaque to callers; only the document that produced them may touch them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bs4 import BeautifulSoup, Tag

Element = Any


class HtmlDocument(ABC):
    """Abstract parsed HTML document."""

    @abstractmethod
    def root(self) -> Element:
        """The ``<body>`` element, or the document itself for fragments."""

    @abstractmethod
    def select(self, selector: str, scope: Element | None = None) -> list[Element]:
        """All elements matching ``selector`` (document order)."""

    def select_one(self, selector: str, scope: Element | None = None) -> Element | None:
        found = self.select(selector, scope)
        return found[0] if found else None

    @abstractmethod
    def all_elements(self, scope: Element) -> list[Element]:
        """Every descendant element of ``scope``."""

    @abstractmethod
    def get_attr(self, el: Element, name: str) -> str | None: ...

    @abstractmethod
    def set_attr(self, el: Element, name: str, value: str) -> None: ...

    @abstractmethod
    def remove_attr(self, el: Element, name: str) -> None: ...

    @abstractmethod
    def attr_names(self, el: Element) -> list[str]: ...

    @abstractmethod
    def text(self, el: Element) -> str:
        """Whitespace-normalised text content."""

    @abstractmethod
    def remove(self, el: Element) -> None: ...

    @abstractmethod
    def replace_with_new(
        self, el: Element, tag: str, text: str, attrs: dict[str, str] | None = None,
    ) -> Element:
        """Replace ``el`` by a new ``<tag>`` holding ``text``."""

    @abstractmethod
    def inner_html(self, el: Element) -> str: ...


class SoupDocument(HtmlDocument):
    """HtmlDocument backed by BeautifulSoup with the stdlib parser."""

    def __init__(self, markup: str):
        self._soup = BeautifulSoup(markup, "html.parser")

    def root(self) -> Element:
        return self._soup.body or self._soup

    def select(self, selector: str, scope: Element | None = None) -> list[Element]:
        return list((scope if scope is not None else self._soup).select(selector))

    def all_elements(self, scope: Element) -> list[Element]:
        return [el for el in scope.find_all(True) if isinstance(el, Tag)]

    def get_attr(self, el: Element, name: str) -> str | None:
        value = el.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def set_attr(self, el: Element, name: str, value: str) -> None:
        el[name] = value

    def remove_attr(self, el: Element, name: str) -> None:
        if name in el.attrs:
            del el[name]

    def attr_names(self, el: Element) -> list[str]:
        return list(el.attrs)

    def text(self, el: Element) -> str:
        return " ".join(el.get_text(" ").split())

    def remove(self, el: Element) -> None:
        # Nested matches: the parent may already have taken this one with it
        if getattr(el, "decomposed", False):
            return
        el.decompose()

    def replace_with_new(
        self, el: Element, tag: str, text: str, attrs: dict[str, str] | None = None,
    ) -> Element:
        new = self._soup.new_tag(tag, attrs=attrs or {})
        new.string = text
        el.replace_with(new)
        return new

    def inner_html(self, el: Element) -> str:
        return el.decode_contents()


def parse_html(markup: str) -> HtmlDocument:
    """Parse markup with the default HtmlDocument implementation."""
    return SoupDocument(markup)
