"""Shared fixtures: a small fake shop served from memory."""

import html
from typing import List, Sequence, Tuple
from urllib.parse import parse_qs, urlparse

import pytest
from bs4 import BeautifulSoup

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.core.cancellation import CancellationToken
from product_scraper.core.scraper import ProductScraper
from product_scraper.core.scrapers.base import BaseFetcher
from product_scraper.core.scrapers.static_fetcher import StaticFetcher

BASE_URL = "https://shop.test"
IMAGE_PLACEHOLDER = "https://shop.test/placeholder.png"
DESCRIPTION_PLACEHOLDER = "Lorem"

SITE_CONFIG = {
    "base_url": BASE_URL,
    "brands": ["Acme", "Globex"],
    "product_page_selectors": {
        "id": "#sku",
        "name": "h1",
        "images": ".gallery img",
        "description": "#description",
    },
    "product_list_selectors": {
        "names": ".card .title",
        "links": ".card a.link",
        "images": ".card img",
        "descriptions": ".card p",
    },
    "placeholders": {
        "image": IMAGE_PLACEHOLDER,
        "description": DESCRIPTION_PLACEHOLDER,
    },
    "paginations": {
        "catalog": [BASE_URL + "/catalog/", "?page="],
        "search": [BASE_URL + "/search?q=", "&page="],
    },
}


def card(name: str, href: str, image: str = "/img/x.png", description: str = "Some text") -> Tuple[str, str, str, str]:
    return name, href, image, description


def list_page(cards: Sequence[Tuple[str, str, str, str]]) -> str:
    """HTML of a product list page with one .card per entry."""
    blocks = [
        '<div class="card">'
        f'<a class="link" href="{html.escape(href)}"><span class="title">{html.escape(name)}</span></a>'
        f'<img src="{html.escape(image)}"/>'
        f"<p>{html.escape(description)}</p>"
        "</div>"
        for name, href, image, description in cards
    ]
    return f'<html><body><div id="list">{"".join(blocks)}</div></body></html>'


def product_page(name: str, sku: str = "SKU: AB-12", images: Sequence[str] = ("/img/1.png",),
                 description: str = "Description: A fine product.") -> str:
    gallery = "".join(f'<img src="{html.escape(src)}"/>' for src in images)
    return (
        "<html><body>"
        f"<h1>{html.escape(name)}</h1>"
        f'<span id="sku">{html.escape(sku)}</span>'
        f'<div class="gallery">{gallery}</div>'
        f'<div id="description">{html.escape(description)}</div>'
        "</body></html>"
    )


class SearchSite(BaseFetcher):
    """Fake shop whose search answers a query with the products containing it.

    Results are split into pages of page_size; a page past the end has an
    empty product list. Product pages are served from product_pages.
    """

    def __init__(self, products: List[Tuple[str, str]], page_size: int = 2, product_pages=None):
        self.products = products
        self.page_size = page_size
        self.product_pages = dict(product_pages or {})
        self.requested: List[str] = []

    def search_urls(self) -> List[str]:
        return [url for url in self.requested if "/search?" in url]

    def get_page(self, url: str, token: CancellationToken) -> BeautifulSoup:
        token.raise_if_cancelled()
        self.requested.append(url)

        if url in self.product_pages:
            return BeautifulSoup(self.product_pages[url], "lxml")

        params = parse_qs(urlparse(url).query, keep_blank_values=True)
        query = params.get("q", [""])[0].lower()
        page = int(params["page"][0]) if "page" in params else 1

        found = [(name, href) for name, href in self.products if query in name.lower()]
        shown = found[(page - 1) * self.page_size:page * self.page_size]
        return BeautifulSoup(list_page([card(name, href) for name, href in shown]), "lxml")


@pytest.fixture
def config() -> ScraperConfig:
    return ScraperConfig.model_validate(SITE_CONFIG)


@pytest.fixture
def token() -> CancellationToken:
    return CancellationToken()


@pytest.fixture
def fetcher() -> StaticFetcher:
    return StaticFetcher()


@pytest.fixture
def scraper(config, fetcher) -> ProductScraper:
    return ProductScraper(config, fetcher=fetcher)


@pytest.fixture
def document():
    """Parse an HTML string."""
    def parse(markup: str) -> BeautifulSoup:
        return BeautifulSoup(markup, "lxml")
    return parse
