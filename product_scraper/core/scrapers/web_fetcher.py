import requests
from bs4 import BeautifulSoup
from typing import Optional, Tuple
import random
import logging

from product_scraper.config.settings import get_settings
from product_scraper.core.cancellation import CancellationToken
from product_scraper.core.errors import FetchError
from product_scraper.core.scrapers.base import BaseFetcher

CHUNK_SIZE = 64 * 1024


class WebFetcher(BaseFetcher):
    """Fetcher that downloads pages over HTTP.

    Keeps one requests session for connection reuse, pauses a random
    moment before each request to be respectful to the server, and streams
    the body so that an aborted operation stops downloading promptly.
    """

    def __init__(self,
                 user_agent: Optional[str] = None,
                 timeout: Optional[float] = None,
                 delay: Optional[Tuple[float, float]] = None,
                 session: Optional[requests.Session] = None):
        """Initialize the web fetcher.

        Args:
            user_agent: Optional custom user agent string
            timeout: Socket timeout per request in seconds
            delay: Bounds of the random pause before each request, in seconds
            session: Optional preconfigured requests session
        """
        settings = get_settings()
        self.user_agent = user_agent or settings.USER_AGENT
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.delay = delay if delay is not None else settings.REQUEST_DELAY
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml",
            "Accept-Language": "en-US,en;q=0.9",
        })
        self.logger = logging.getLogger("scraper.fetcher")

    def get_page(self, url: str, token: CancellationToken) -> BeautifulSoup:
        """Fetch a page and parse it with BeautifulSoup.

        Args:
            url: URL to fetch
            token: Cancellation token of the calling operation

        Returns:
            BeautifulSoup object for HTML parsing

        Raises:
            FetchError: If the request fails or returns an error status
            OperationCancelled: If the token is cancelled before or during the request
        """
        token.raise_if_cancelled()

        low, high = self.delay
        if high > 0:
            token.wait(random.uniform(low, high))

        self.logger.info("Fetching %s", url)
        try:
            with self.session.get(url, timeout=self.timeout, stream=True) as response:
                response.raise_for_status()  # Raise exception for 4XX/5XX responses
                chunks = []
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    token.raise_if_cancelled()
                    chunks.append(chunk)
                encoding = response.encoding
        except requests.RequestException as e:
            self.logger.error("Error fetching %s: %s", url, str(e))
            raise FetchError(url) from e

        return BeautifulSoup(b"".join(chunks), "lxml", from_encoding=encoding)
