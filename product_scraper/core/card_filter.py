# Filtering of product cards by whether they show a real image and a real
# description. Sites put a placeholder image or text in cards whose content
# is missing; comparing against the configured placeholders tells them apart.

import logging
from typing import Callable, List, Optional, Sequence

from bs4 import BeautifulSoup

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.core.errors import ConfigurationError, SelectionError
from product_scraper.core.extraction.product import ProductExtractor
from product_scraper.core.models import CardPresence
from product_scraper.core.pagination import PageExtractor

CardPredicate = Callable[[bool, bool], bool]

logger = logging.getLogger("scraper.card_filter")


def _presence(values: Optional[Sequence[str]], placeholder: str, count: int, what: str) -> List[bool]:
    if values is None or not placeholder:
        return [False] * count

    if len(values) != count:
        raise SelectionError(f"Invalid selection: {what} number and product cards number are not equal")
    return [value != placeholder for value in values]


def filter_cards(cards: Sequence, predicate: CardPredicate,
                 image_urls: Optional[Sequence[str]] = None,
                 descriptions: Optional[Sequence[str]] = None,
                 image_placeholder: str = "",
                 description_placeholder: str = "") -> list:
    """Keep the cards for which predicate(image_present, description_present) holds.

    A card's image is present when its URL differs from image_placeholder,
    its description when it differs from description_placeholder. Without
    the values or the placeholder, the signal is False for every card.
    Order is preserved.

    Raises:
        SelectionError: If image_urls or descriptions do not pair up with cards
    """
    images_present = _presence(image_urls, image_placeholder, len(cards), "images")
    descriptions_present = _presence(descriptions, description_placeholder, len(cards), "descriptions")

    return [
        card
        for card, image_present, description_present in zip(cards, images_present, descriptions_present)
        if predicate(image_present, description_present)
    ]


def build_predicate(image: Optional[str] = None, description: Optional[str] = None,
                    mode: str = "all") -> CardPredicate:
    """Build a card predicate from per-signal requirements.

    image and description are "present", "absent" or None (don't care).
    mode "all" requires every given condition, "any" at least one of them.

    Example:
        build_predicate(image="absent", description="absent", mode="any")
        keeps cards missing an image or a description.
    """
    conditions = []
    for name, requirement in (("image", image), ("description", description)):
        if requirement is None:
            continue
        if requirement not in ("present", "absent"):
            raise ConfigurationError(f"Expected 'present' or 'absent' for {name} but received {requirement!r}")
        conditions.append((name, requirement == "present"))

    if mode not in ("all", "any"):
        raise ConfigurationError(f"Expected 'all' or 'any' for mode but received {mode!r}")
    if not conditions:
        return lambda image_present, description_present: True

    combine = all if mode == "all" else any

    def predicate(image_present: bool, description_present: bool) -> bool:
        signals = {"image": image_present, "description": description_present}
        return combine(signals[name] == wanted for name, wanted in conditions)

    return predicate


class CardFilter:
    """Applies filter_cards to product lists using the site configuration."""

    def __init__(self, config: ScraperConfig, extractor: ProductExtractor):
        self.list_selectors = config.product_list_selectors
        self.placeholders = config.placeholders
        self.extractor = extractor

    def presence(self, document: BeautifulSoup, cards: Sequence) -> List[CardPresence]:
        """Pair each card with its image and description signals.

        Images and descriptions are only extracted when both their selector
        and their placeholder are configured.
        """
        image_urls = None
        if self.list_selectors.images and self.placeholders.image:
            image_urls = self.extractor.extract_product_image_urls_from_list(document)

        descriptions = None
        if self.list_selectors.descriptions and self.placeholders.description:
            descriptions = self.extractor.extract_product_descriptions_from_list(document)

        images_present = _presence(image_urls, self.placeholders.image, len(cards), "images")
        descriptions_present = _presence(descriptions, self.placeholders.description, len(cards), "descriptions")

        return [
            CardPresence(card, image_present, description_present)
            for card, image_present, description_present in zip(cards, images_present, descriptions_present)
        ]

    def page_presence(self, extractor: PageExtractor) -> Callable[[BeautifulSoup], List[CardPresence]]:
        """Wrap a card extractor so that it yields CardPresence records."""
        if not callable(extractor):
            raise ConfigurationError(f"Expected a callable extractor but received {extractor!r}")

        def extract(document: BeautifulSoup) -> List[CardPresence]:
            return self.presence(document, list(extractor(document)))

        return extract

    @staticmethod
    def apply(records: Sequence[CardPresence], predicate: CardPredicate) -> list:
        """Cards of the records that satisfy predicate, in order."""
        if not callable(predicate):
            raise ConfigurationError(f"Expected a callable predicate but received {predicate!r}")
        return [record.card for record in records
                if predicate(record.image_present, record.description_present)]

    def filter_page(self, document: BeautifulSoup, extractor: PageExtractor,
                    predicate: CardPredicate) -> list:
        """Filter the cards extractor finds on one page."""
        records = self.page_presence(extractor)(document)
        kept = self.apply(records, predicate)
        logger.debug("Kept %d of %d cards", len(kept), len(records))
        return kept
