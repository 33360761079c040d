# Per-site configuration: selectors, placeholders, pagination URL templates
# and fuzzy-match thresholds. Instances are immutable once validated.

from pathlib import Path
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ProductPageSelectors(_FrozenModel):
    """Selectors of a product page."""

    id: str = Field(default="", description="Element containing the product ID")
    name: str = Field(default="", description="Element containing the product name")
    images: str = Field(default="", description="Product images (src attribute)")
    description: str = Field(default="", description="Product description")


class ProductListSelectors(_FrozenModel):
    """Selectors of a product list (cards on a catalog or search results page)."""

    names: str = Field(default="", description="Product name in each card")
    links: str = Field(default="", description="Link to the product page in each card")
    images: str = Field(default="", description="Main image in each card")
    descriptions: str = Field(default="", description="Description in each card")

    def first_configured(self) -> str:
        """Any selector that locates cards, used to check for search results."""
        return self.names or self.links or self.images or self.descriptions


class ProductPageOptions(_FrozenModel):
    """Options for extracting product page data.

    id_format is used when the ID cannot be selected on its own, e.g. the
    element reads "ID: 0123" and only "0123" is wanted. id_match_index picks
    which match of the format to keep. has_description_label drops the first
    word of the description ("Description: ...").
    """

    id_format: Optional[Literal["numeric", "alphanumeric"]] = None
    id_match_index: int = Field(default=0, ge=0)
    has_description_label: bool = False


class Placeholders(_FrozenModel):
    """Values a site shows in a card instead of a real image or description."""

    image: str = ""
    description: str = ""


class UrlTemplate(_FrozenModel):
    """Pagination URL split around its criteria.

    The N-th page for a criteria (a brand, a search query) is
    prefix + criteria + suffix + N. The template may also be given as a
    list of one or two strings; with only a prefix, a search can be checked
    but not paginated.
    """

    prefix: str = ""
    suffix: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_parts(cls, value):
        if isinstance(value, (list, tuple)):
            if len(value) > 2 or not all(isinstance(part, str) for part in value):
                raise ValueError("expected a list of at most two strings")
            parts = list(value) + [""] * (2 - len(value))
            return {"prefix": parts[0], "suffix": parts[1]}
        return value

    def page_url(self, criteria: str) -> str:
        """URL before the page number for the given criteria."""
        return self.prefix + criteria + self.suffix


class Paginations(_FrozenModel):
    catalog: UrlTemplate = UrlTemplate()
    search: UrlTemplate = UrlTemplate()


class MatchThresholds(_FrozenModel):
    """Thresholds for judging the top fuzzy-search hit (lower score is closer).

    first_score: a top score at or above it means nothing is close enough.
    first_score_warning: a top score at or above it is usable but uncertain.
    difference: a runner-up closer than this makes the top hit ambiguous.
    """

    first_score: float = Field(default=0.19, ge=0, le=1)
    first_score_warning: float = Field(default=0.11, ge=0, le=1)
    difference: float = Field(default=0.03, ge=0, le=1)


class ScraperConfig(_FrozenModel):
    """Configuration of one e-commerce website."""

    base_url: str = Field(
        default="",
        description="If set, relative URLs are made absolute against its scheme and host",
    )
    brands: List[str] = Field(default_factory=list)
    product_page_selectors: ProductPageSelectors = ProductPageSelectors()
    product_list_selectors: ProductListSelectors = ProductListSelectors()
    product_page_options: ProductPageOptions = ProductPageOptions()
    placeholders: Placeholders = Placeholders()
    paginations: Paginations = Paginations()
    match_thresholds_brand: MatchThresholds = MatchThresholds()
    match_thresholds_brandless: MatchThresholds = MatchThresholds()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ScraperConfig":
        """Load and validate a JSON configuration file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
