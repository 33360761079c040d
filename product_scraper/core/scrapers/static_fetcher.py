import logging
from typing import Dict, List

from bs4 import BeautifulSoup

from product_scraper.core.cancellation import CancellationToken
from product_scraper.core.errors import FetchError
from product_scraper.core.scrapers.base import BaseFetcher


class StaticFetcher(BaseFetcher):
    """A fetcher that serves HTML from memory (for testing and offline runs).

    Unknown URLs fail like unreachable ones. Every requested URL is recorded
    in ``requested`` so callers can check what would have been fetched.
    """

    def __init__(self, pages: Dict[str, str] = None):
        self.pages = dict(pages or {})
        self.requested: List[str] = []
        self.logger = logging.getLogger("scraper.fetcher.static")

    def add_page(self, url: str, html: str) -> None:
        self.pages[url] = html

    def get_page(self, url: str, token: CancellationToken) -> BeautifulSoup:
        token.raise_if_cancelled()
        self.requested.append(url)
        self.logger.debug("Serving %s", url)

        if url not in self.pages:
            raise FetchError(url)
        return BeautifulSoup(self.pages[url], "lxml")
