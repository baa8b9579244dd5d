"""
DOM capability over rendered HTML.

HtmlDocument is the only thing extractors see: they evaluate CSS selectors
against it and never touch the browser, so they can be tested against
fixture HTML.
"""
from typing import List, Optional

from bs4 import BeautifulSoup


def _text(element) -> str:
    # Collapse whitespace the way innerText renders it
    return " ".join(element.get_text(" ", strip=True).split())


class HtmlDocument:
    """A rendered page, queryable with CSS selectors."""

    def __init__(self, url: str, html: str):
        self.url = url
        self.html = html
        self._soup = BeautifulSoup(html, "html.parser")

    def select_text(self, selector: str) -> Optional[str]:
        """Text of the first match, or None."""
        element = self._soup.select_one(selector)
        if element is None:
            return None
        return _text(element)

    def select_attr(self, selector: str, attribute: str) -> Optional[str]:
        """Attribute of the first match, or None."""
        element = self._soup.select_one(selector)
        if element is None:
            return None
        value = element.get(attribute)
        return value.strip() if isinstance(value, str) else None

    def select_all(self, selector: str) -> List["HtmlFragment"]:
        """Every match, each usable as a nested query scope."""
        return [HtmlFragment(self.url, element) for element in self._soup.select(selector)]

    def select_all_text(self, selector: str) -> List[str]:
        return [_text(element) for element in self._soup.select(selector)]


class HtmlFragment(HtmlDocument):
    """Sub-tree of a document (one video, one rating row...)."""

    def __init__(self, url: str, element):
        self.url = url
        self.html = str(element)
        self._soup = element

    @property
    def text(self) -> str:
        return _text(self._soup)

    def attr(self, attribute: str) -> Optional[str]:
        value = self._soup.get(attribute)
        return value.strip() if isinstance(value, str) else None
