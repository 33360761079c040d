import logging
from typing import Callable, List, Sequence, TypeVar

from bs4 import BeautifulSoup

from product_scraper.core.cancellation import CancellationToken
from product_scraper.core.errors import ConfigurationError, OperationCancelled
from product_scraper.core.models import PaginationSpec
from product_scraper.core.scrapers.base import BaseFetcher

T = TypeVar("T")

PageExtractor = Callable[[BeautifulSoup], Sequence[T]]


class Paginator:
    """Walks numbered pages and accumulates what an extractor finds on them.

    When the pagination has no last page, its end is detected heuristically.
    A page past the end either:
    1. fails to load or has no product list, so the extractor raises,
    2. has nothing to extract, or
    3. repeats a page already seen, as some servers do.
    Each stops the iteration. This relies on how the site behaves and is a
    best-effort rule; a site that serves endless distinct pages never ends.

    Within a bounded range an empty page contributes nothing and the walk
    goes on, while failures and repeats still end it early. Only failures
    of the first page propagate.
    """

    def __init__(self, fetcher: BaseFetcher):
        self.fetcher = fetcher
        self.logger = logging.getLogger("scraper.pagination")

    def iterate(self, pagination: PaginationSpec, extractor: PageExtractor,
                token: CancellationToken) -> List[T]:
        """Iterate over pagination.

        Args:
            pagination: URL prefix and page range
            extractor: Called with each page's document; must raise when the
                page has nothing to extract
            token: Cancellation token passed to every fetch

        Returns:
            Results of extractor from each page, concatenated in page order

        Raises:
            Exception: Whatever fetching or extracting the first page raised
            OperationCancelled: If the token is cancelled
        """
        if not callable(extractor):
            raise ConfigurationError(f"Expected a callable extractor but received {extractor!r}")

        accumulated: List[T] = []
        page_number = pagination.first

        while pagination.last is None or page_number <= pagination.last:
            url = pagination.page_url(page_number)
            try:
                document = self.fetcher.get_page(url, token)
                data = list(extractor(document))
            except OperationCancelled:
                raise
            except Exception as e:
                if page_number == pagination.first:
                    raise
                # The pagination range is probably exceeded
                self.logger.info("Stopping at page %d of %s: %s", page_number, pagination.url, e)
                break

            if not data and pagination.last is None:
                self.logger.info("Stopping at page %d of %s: page is empty", page_number, pagination.url)
                break

            # A page served again has its first item already accumulated
            if data and data[0] in accumulated:
                self.logger.info("Stopping at page %d of %s: page repeats an earlier one",
                                 page_number, pagination.url)
                break

            accumulated.extend(data)
            self.logger.debug("Page %d: %d items, %d in total", page_number, len(data), len(accumulated))
            page_number += 1

        return accumulated
