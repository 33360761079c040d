# Low-level selection helpers over parsed documents.
# Every helper fails loudly when a selector matches nothing: an empty
# selection always means a wrong selector or the end of a pagination.

from typing import List, Optional

from bs4 import BeautifulSoup

from product_scraper.core.errors import SelectionError
from product_scraper.core.extraction.urls import convert_to_absolute


def _select(document: BeautifulSoup, selector: str):
    if not selector:
        raise SelectionError("Selector is not configured")

    elements = document.select(selector)
    if not elements:
        raise SelectionError(f"Selector {selector} does not match any element")
    return elements


def extract_text_contents(document: BeautifulSoup, selector: str) -> List[str]:
    """Stripped text of every element matched by selector, in document order."""
    return [element.get_text().strip() for element in _select(document, selector)]


def extract_attr_values(document: BeautifulSoup, selector: str, attr_name: str) -> List[str]:
    """Value of attr_name for every element matched by selector.

    Raises:
        SelectionError: If nothing matches or a matched element lacks the attribute
    """
    values = []
    for element in _select(document, selector):
        value = element.get(attr_name)
        if value is None:
            raise SelectionError(f"Element selected by {selector} does not have an attribute {attr_name}")
        values.append(value)
    return values


def extract_urls(document: BeautifulSoup, selector: str, attr_name: str,
                 base_url: Optional[str] = None) -> List[str]:
    """URLs held in attr_name of the selected elements.

    When base_url is given, relative URLs are converted to absolute ones.
    """
    urls = extract_attr_values(document, selector, attr_name)
    return convert_to_absolute(urls, base_url) if base_url else urls
