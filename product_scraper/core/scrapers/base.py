# This file defines the abstract base class for all document fetchers
# Every component that needs a page goes through this interface, so the
# network can be swapped for in-memory pages without touching the core

import abc  # Abstract Base Classes let us declare the fetcher contract
from bs4 import BeautifulSoup  # Parsed documents handed to the extraction helpers

from product_scraper.core.cancellation import CancellationToken


class BaseFetcher(abc.ABC):
    """Base class for document fetchers.

    A fetcher turns a URL into a parsed document. Implementations must:
    1. Check the cancellation token before doing any work
    2. Raise FetchError for every failure, whatever its cause
       (DNS, timeout, HTTP status, unparsable body)
    3. Raise OperationCancelled when the token is cancelled mid-flight

    The pagination loop and the search resolver only depend on this
    contract, so they behave the same against a live site and against
    the static pages used in tests.
    """

    @abc.abstractmethod
    def get_page(self, url: str, token: CancellationToken) -> BeautifulSoup:
        """Fetch a page and parse it.

        Args:
            url: Absolute URL of the page
            token: Cancellation token of the operation issuing the fetch

        Returns:
            BeautifulSoup document of the page

        Raises:
            FetchError: If the page cannot be fetched or parsed
            OperationCancelled: If the token was cancelled
        """
        raise NotImplementedError("Concrete fetchers must implement get_page()")
