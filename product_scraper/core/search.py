import logging
from typing import List

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.core.cancellation import CancellationToken
from product_scraper.core.errors import ConfigurationError, NoMatchError, SearchEngineError
from product_scraper.core.extraction.product import ProductExtractor
from product_scraper.core.matching.fuzzy import Relevance, fuse_search_product
from product_scraper.core.models import BasicInfo, PaginationSpec, ProductCardData
from product_scraper.core.pagination import Paginator
from product_scraper.core.scrapers.base import BaseFetcher


class SearchResolver:
    """Finds a product's page through the site's search.

    Resolution runs in three steps:
    1. Narrow the product name to a query the search engine answers
       (some engines return nothing for long queries)
    2. Collect the name and URL of every search result across pages
    3. Pick the result closest to the product by fuzzy matching
    """

    def __init__(self, config: ScraperConfig, fetcher: BaseFetcher,
                 paginator: Paginator, extractor: ProductExtractor):
        self.config = config
        self.fetcher = fetcher
        self.paginator = paginator
        self.extractor = extractor
        self.search_template = config.paginations.search
        self.logger = logging.getLogger("scraper.search")

    def has_search_result(self, query: str, token: CancellationToken) -> bool:
        """Did the search engine find anything for query?"""
        selector = self.config.product_list_selectors.first_configured()
        if not selector:
            raise ConfigurationError("At least one product list selector must be configured to search")

        document = self.fetcher.get_page(self.search_template.prefix + query, token)
        return bool(document.select(selector))

    def narrow_query(self, query: str, token: CancellationToken) -> str:
        """Longest prefix of query for which the search returns results.

        The full query is tried first. Otherwise the prefix length is
        bisected: left is the longest length known to have results (a single
        character is assumed to), right the shortest known to have none.
        Should even the first character find nothing, that single character
        is still returned.
        """
        if self.has_search_result(query, token):
            return query

        left, right = 1, len(query)
        while right - left > 1:
            middle = (left + right) // 2
            if self.has_search_result(query[:middle], token):
                left = middle
            else:
                right = middle

        narrowed = query[:left]
        self.logger.info("Narrowed search query %r to %r", query, narrowed)
        return narrowed

    def gather_candidates(self, query: str, token: CancellationToken) -> List[BasicInfo]:
        """Basic info of every search result for query, across all pages."""
        pagination = PaginationSpec(url=self.search_template.page_url(query))
        candidates = self.paginator.iterate(
            pagination, self.extractor.extract_products_basic_info_from_list, token
        )

        if not candidates:
            raise SearchEngineError("Search engine on the website does not work")
        self.logger.debug("Gathered %d search results for %r", len(candidates), query)
        return candidates

    def search_product(self, basic_info: BasicInfo, token: CancellationToken) -> str:
        """Product page URL of the search result closest to basic_info.

        Raises:
            SearchEngineError: If the search returns no results at all
            NoMatchError: If no result is close enough
        """
        if basic_info.url:
            return basic_info.url

        query = self.narrow_query(basic_info.name, token)
        candidates = self.gather_candidates(query, token)

        result = fuse_search_product(
            basic_info,
            [candidate.name for candidate in candidates],
            self.config.match_thresholds_brand,
            self.config.match_thresholds_brandless,
        )

        if result.relevance == Relevance.NONE:
            raise NoMatchError("No products close enough were found")

        match = candidates[result.index]
        if result.relevance == Relevance.WEAK:
            self.logger.warning("Weak match for %r: %r should be checked", basic_info.name, match.name)
        elif result.relevance == Relevance.AMBIGUOUS:
            self.logger.warning("Ambiguous match for %r: picked %r", basic_info.name, match.name)

        return match.url

    def search_product_card_data(self, basic_info: BasicInfo, token: CancellationToken) -> ProductCardData:
        """Images and description from the page of the resolved product."""
        url = self.search_product(basic_info, token)
        document = self.fetcher.get_page(url, token)

        return ProductCardData(
            image_urls=self.extractor.extract_product_image_urls(document),
            description=self.extractor.extract_product_description(document),
        )
