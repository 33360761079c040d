import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.core.errors import SelectionError
from product_scraper.core.extraction.selectors import extract_text_contents, extract_urls
from product_scraper.core.models import BasicInfo, ProductPage

# Product ID formats, e.g. numeric "1_2-3", alphanumeric "1x_2-y"
ID_FORMATS = {
    "numeric": re.compile(r"\d(?:[\d_\-]*\d)?"),
    "alphanumeric": re.compile(r"\w(?:[\w_\-]*\w)?", re.ASCII),
}

logger = logging.getLogger("scraper.extractor")


class ProductExtractor:
    """Extracts product data from product pages and product lists.

    Selectors and options come from the site configuration. Relative image
    and page URLs are made absolute when the configuration has a base_url.
    """

    def __init__(self, config: ScraperConfig):
        self.config = config
        self.page_selectors = config.product_page_selectors
        self.list_selectors = config.product_list_selectors
        self.options = config.product_page_options

    def _urls(self, document: BeautifulSoup, selector: str, attr_name: str) -> List[str]:
        return extract_urls(document, selector, attr_name, self.config.base_url or None)

    # Product page

    def extract_product_id(self, document: BeautifulSoup) -> str:
        """Extract the product ID.

        Without an id_format the whole text of the first selected element is
        the ID. With one, e.g. "Product id: AAAA0000" and alphanumeric format
        with id_match_index 2, the ID is "AAAA0000".
        """
        text = extract_text_contents(document, self.page_selectors.id)[0]
        if not self.options.id_format:
            return text

        matches = [match.group(0) for match in ID_FORMATS[self.options.id_format].finditer(text)]
        if not matches:
            raise SelectionError(
                f"No matches against {self.options.id_format} pattern were found in the string {text}"
            )
        if self.options.id_match_index >= len(matches):
            raise SelectionError(
                f"Only {len(matches)} matches against {self.options.id_format} pattern "
                f"were found in the string {text}"
            )
        return matches[self.options.id_match_index]

    def extract_product_name(self, document: BeautifulSoup) -> str:
        return extract_text_contents(document, self.page_selectors.name)[0]

    def extract_product_description(self, document: BeautifulSoup) -> str:
        """Extract the description, dropping its label if the site prints one."""
        description = "\n".join(extract_text_contents(document, self.page_selectors.description))
        if self.options.has_description_label:
            return re.sub(r"\S+\s+", "", description, count=1)
        return description

    def extract_product_image_urls(self, document: BeautifulSoup) -> List[str]:
        return self._urls(document, self.page_selectors.images, "src")

    def extract_product_basic_info(self, document: BeautifulSoup) -> BasicInfo:
        name = self.extract_product_name(document)
        return BasicInfo(name=name, brand=self.recognize_brand(name))

    def extract_product_page(self, document: BeautifulSoup, url: str) -> ProductPage:
        """Extract every product page field that has a configured selector."""
        name = self.extract_product_name(document) if self.page_selectors.name else None
        return ProductPage(
            url=url,
            name=name,
            id=self.extract_product_id(document) if self.page_selectors.id else None,
            brand=self.recognize_brand(name) if name else None,
            image_urls=self.extract_product_image_urls(document) if self.page_selectors.images else [],
            description=(
                self.extract_product_description(document) if self.page_selectors.description else None
            ),
        )

    # Product list

    def extract_product_names_from_list(self, document: BeautifulSoup) -> List[str]:
        return extract_text_contents(document, self.list_selectors.names)

    def extract_product_page_urls_from_list(self, document: BeautifulSoup) -> List[str]:
        return self._urls(document, self.list_selectors.links, "href")

    def extract_product_image_urls_from_list(self, document: BeautifulSoup) -> List[str]:
        return self._urls(document, self.list_selectors.images, "src")

    def extract_product_descriptions_from_list(self, document: BeautifulSoup) -> List[str]:
        return extract_text_contents(document, self.list_selectors.descriptions)

    def extract_products_basic_info_from_list(self, document: BeautifulSoup) -> List[BasicInfo]:
        """Name, recognized brand and product page URL of each card."""
        names = self.extract_product_names_from_list(document)
        urls = self.extract_product_page_urls_from_list(document)

        if len(names) != len(urls):
            raise SelectionError("Invalid selection: links number and names number are not equal")

        return [
            BasicInfo(name=name, brand=self.recognize_brand(name), url=url)
            for name, url in zip(names, urls)
        ]

    def recognize_brand(self, product_name: str) -> Optional[str]:
        """Recognize a brand by the product name.

        A brand the name starts with wins over one it merely contains.
        """
        lowered = product_name.lower()

        for brand in self.config.brands:
            if brand and lowered.startswith(brand.lower()):
                return brand

        for brand in self.config.brands:
            if brand and brand.lower() in lowered:
                return brand

        logger.debug("No known brand in %r", product_name)
        return None
