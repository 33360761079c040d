import logging
from typing import Any, Dict, Optional, Union

from bs4 import BeautifulSoup

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.core.cancellation import CancellationToken
from product_scraper.core.card_filter import CardFilter, CardPredicate
from product_scraper.core.errors import ConfigurationError
from product_scraper.core.extraction.product import ProductExtractor
from product_scraper.core.models import BasicInfo, PaginationSpec, ProductCardData, ProductPage
from product_scraper.core.pagination import PageExtractor, Paginator
from product_scraper.core.scrapers.base import BaseFetcher
from product_scraper.core.scrapers.web_fetcher import WebFetcher
from product_scraper.core.search import SearchResolver


class ProductScraper:
    """Scraper of one e-commerce website.

    Wires the site configuration, a fetcher and one cancellation token into
    the extraction, pagination, card filtering and search components.
    Every operation captures the current token when it starts; abort()
    cancels all operations running under it and reset() issues a fresh
    token for the ones that follow.

    Example:
        scraper = ProductScraper(ScraperConfig.from_file("shop.json"))
        url = scraper.search_product(BasicInfo(name="Foo 500ml", brand="Acme"))
    """

    def __init__(self, config: Optional[Union[ScraperConfig, Dict[str, Any]]] = None,
                 fetcher: Optional[BaseFetcher] = None):
        """Initialize the scraper.

        Args:
            config: Site configuration, or a dict validated into one
            fetcher: Document fetcher, a WebFetcher by default

        Raises:
            pydantic.ValidationError: If config is a malformed dict
        """
        if config is None:
            config = ScraperConfig()
        elif not isinstance(config, ScraperConfig):
            config = ScraperConfig.model_validate(config)

        self.config = config
        self.fetcher = fetcher or WebFetcher()
        self._token = CancellationToken()

        self.extractor = ProductExtractor(config)
        self.paginator = Paginator(self.fetcher)
        self.card_filter = CardFilter(config, self.extractor)
        self.resolver = SearchResolver(config, self.fetcher, self.paginator, self.extractor)

        self.logger = logging.getLogger("scraper.product")

    @property
    def token(self) -> CancellationToken:
        return self._token

    def abort(self) -> None:
        """Cancel every operation running under the current token."""
        self.logger.info("Aborting running operations")
        self._token.cancel()

    def reset(self) -> None:
        """Issue a fresh token for subsequent operations."""
        self._token = CancellationToken()

    # Fetching

    def fetch_page(self, url: str) -> BeautifulSoup:
        return self.fetcher.get_page(url, self._token)

    def search(self, query: str) -> BeautifulSoup:
        """First page of search results for query."""
        return self.fetch_page(self.config.paginations.search.prefix + query)

    def iterate_over_pagination(self, pagination: Union[PaginationSpec, Dict[str, Any]],
                                extractor: PageExtractor) -> list:
        """Accumulate extractor results over the pages of pagination.

        pagination may be a PaginationSpec or a dict with its fields.
        """
        if isinstance(pagination, dict):
            try:
                pagination = PaginationSpec(**pagination)
            except TypeError as e:
                raise ConfigurationError(f"Invalid pagination: {e}") from e
        return self.paginator.iterate(pagination, extractor, self._token)

    # Product pages

    def scrape_product(self, url: str) -> ProductPage:
        """Fetch a product page and extract its configured fields."""
        return self.extractor.extract_product_page(self.fetch_page(url), url)

    # Card filtering

    def filter_product_cards_from_page(self, document: BeautifulSoup, extractor: PageExtractor,
                                       predicate: CardPredicate) -> list:
        """Cards extractor finds on the page that satisfy predicate.

        Example:
            # product cards without a main image
            urls = scraper.filter_product_cards_from_page(
                document, scraper.extractor.extract_product_page_urls_from_list,
                lambda image_present, description_present: not image_present)
        """
        return self.card_filter.filter_page(document, extractor, predicate)

    def filter_product_cards_from_pagination(self, pagination: Union[PaginationSpec, Dict[str, Any]],
                                             extractor: PageExtractor,
                                             predicate: CardPredicate) -> list:
        """Cards satisfying predicate across all pages of pagination.

        Pages are walked on unfiltered cards, so a repeated page is still
        recognised when all of its cards are filtered out.
        """
        records = self.iterate_over_pagination(pagination, self.card_filter.page_presence(extractor))
        return self.card_filter.apply(records, predicate)

    def filter_product_cards_from_catalog(self, criteria: str, extractor: PageExtractor,
                                          predicate: CardPredicate) -> list:
        """Filter the cards of a catalog section (usually a brand)."""
        url = self.config.paginations.catalog.page_url(criteria)
        return self.filter_product_cards_from_pagination(PaginationSpec(url=url), extractor, predicate)

    def filter_product_cards_from_search(self, query: str, extractor: PageExtractor,
                                         predicate: CardPredicate) -> list:
        """Filter the cards of the search results for query."""
        url = self.config.paginations.search.page_url(query)
        return self.filter_product_cards_from_pagination(PaginationSpec(url=url), extractor, predicate)

    # Search

    def narrow_query(self, query: str) -> str:
        return self.resolver.narrow_query(query, self._token)

    def search_product(self, basic_info: BasicInfo) -> str:
        """Product page URL of the search result closest to basic_info."""
        return self.resolver.search_product(basic_info, self._token)

    def search_product_card_data(self, basic_info: BasicInfo) -> ProductCardData:
        return self.resolver.search_product_card_data(basic_info, self._token)

    # Shortcuts for the list extractions most often passed as extractors

    @property
    def list_extractors(self) -> Dict[str, PageExtractor]:
        return {
            "urls": self.extractor.extract_product_page_urls_from_list,
            "names": self.extractor.extract_product_names_from_list,
            "basic-info": self.extractor.extract_products_basic_info_from_list,
        }

    def list_extractor(self, kind: str) -> PageExtractor:
        extractors = self.list_extractors
        if kind not in extractors:
            raise ConfigurationError(f"Unknown card data {kind!r}, expected one of {sorted(extractors)}")
        return extractors[kind]
