from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field


# Request Models
class ResolveRequest(BaseModel):
    """Request model for resolving a product through the site search."""

    name: str = Field(..., min_length=1, description="Product name to search for")
    brand: Optional[str] = Field(default=None, description="Product brand, narrows the match")
    url: Optional[str] = Field(
        default=None, description="Known product page URL, returned without searching"
    )


class FilterRequest(BaseModel):
    """Request model for filtering product cards of a catalog or search."""

    source: Literal["catalog", "search"] = Field(
        default="catalog", description="Paginate a catalog section or search results"
    )
    criteria: str = Field(..., description="Catalog criteria (usually a brand) or search query")
    image: Optional[Literal["present", "absent"]] = Field(
        default=None, description="Required state of the card image"
    )
    description: Optional[Literal["present", "absent"]] = Field(
        default=None, description="Required state of the card description"
    )
    mode: Literal["all", "any"] = Field(
        default="all", description="Whether all or any of the conditions must hold"
    )
    data: Literal["urls", "names", "basic-info"] = Field(
        default="urls", description="What to return for each kept card"
    )


# Response Models
class BasicInfo(BaseModel):
    """API representation of a product's basic info."""

    name: str
    brand: Optional[str] = None
    url: Optional[str] = None

    class Config:
        from_attributes = True


class ResolveResponse(BaseModel):
    """Response for a product resolution."""

    url: str


class ProductCardDataResponse(BaseModel):
    """Images and description of a resolved product."""

    image_urls: List[str]
    description: str

    class Config:
        from_attributes = True


class ProductPageResponse(BaseModel):
    """API representation of a product page."""

    url: str
    name: Optional[str] = None
    id: Optional[str] = None
    brand: Optional[str] = None
    image_urls: List[str] = []
    description: Optional[str] = None

    class Config:
        from_attributes = True


class FilterResponse(BaseModel):
    """Response containing the kept product cards."""

    cards: List[Union[BasicInfo, str]]
    count: int


class StatusResponse(BaseModel):
    """Acknowledgement of a control operation."""

    success: bool
    message: str


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str
