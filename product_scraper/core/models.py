# Records passed between the scraper components.
# All of them are frozen dataclasses so that equal content compares equal,
# which the pagination loop relies on to spot a page served twice.

from dataclasses import dataclass, field
from typing import Any, List, Optional

from product_scraper.core.errors import ConfigurationError


@dataclass(frozen=True)
class BasicInfo:
    """Minimal identification of a product.

    When url is known, resolving the product returns it as is.
    """

    name: str
    brand: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class ProductPage:
    """Data extracted from a product page."""

    url: str
    name: Optional[str] = None
    id: Optional[str] = None
    brand: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)
    description: Optional[str] = None


@dataclass(frozen=True)
class ProductCardData:
    """Images and description of a resolved product."""

    image_urls: List[str]
    description: str


@dataclass(frozen=True)
class CardPresence:
    """A product card with whether it shows a real image and description."""

    card: Any
    image_present: bool = False
    description_present: bool = False


@dataclass(frozen=True)
class PaginationSpec:
    """A paginated resource: page N lives at url + N.

    Without last the pagination is followed until its end is detected.
    """

    url: str
    first: int = 1
    last: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.url, str):
            raise ConfigurationError(f"Expected str for pagination url but received {self.url!r}")
        for name in ("first", "last"):
            value = getattr(self, name)
            if value is None and name == "last":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"Expected int for pagination {name} but received {value!r}")

    def page_url(self, page_number: int) -> str:
        return f"{self.url}{page_number}"
