from functools import lru_cache

from fastapi import FastAPI, Depends, HTTPException, status, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.config.settings import get_settings
from product_scraper.core.card_filter import build_predicate
from product_scraper.core.errors import (
    ConfigurationError,
    FetchError,
    NoMatchError,
    OperationCancelled,
    ScraperError,
    SearchEngineError,
    SelectionError,
)
from product_scraper.core.models import BasicInfo as CoreBasicInfo
from product_scraper.core.scraper import ProductScraper

from .models import (
    BasicInfo,
    ErrorResponse,
    FilterRequest,
    FilterResponse,
    ProductCardDataResponse,
    ProductPageResponse,
    ResolveRequest,
    ResolveResponse,
    StatusResponse,
)

settings = get_settings()

app = FastAPI(
    title="Product Scraper API",
    description="REST API for scraping product data from an e-commerce website",
    version=settings.PROJECT_VERSION,
)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Most specific classes first: the first matching entry wins
ERROR_STATUS = [
    (NoMatchError, status.HTTP_404_NOT_FOUND),
    (SearchEngineError, status.HTTP_502_BAD_GATEWAY),
    (FetchError, status.HTTP_502_BAD_GATEWAY),
    (OperationCancelled, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (SelectionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
]


@lru_cache()
def get_scraper() -> ProductScraper:
    """Scraper for the site configured by SCRAPER_CONFIG_PATH, built once."""
    return ProductScraper(ScraperConfig.from_file(settings.CONFIG_PATH))


# Operations below block on the network, so they are plain functions that
# FastAPI runs in its thread pool; /abort stays reachable meanwhile.


@app.get("/", tags=["General"])
async def root():
    """Root endpoint providing API information."""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "description": "API for resolving and filtering products of an e-commerce website",
        "endpoints": {
            "GET /": "This information",
            "GET /products": "Scrape a product page",
            "POST /products/resolve": "Find a product page URL by name and brand",
            "POST /products/card-data": "Images and description of a product found by name",
            "POST /cards/filter": "Filter catalog or search product cards",
            "POST /abort": "Abort running operations",
            "POST /reset": "Allow new operations after an abort",
        },
    }


@app.get("/products", response_model=ProductPageResponse, tags=["Products"])
def get_product(
    url: str = Query(..., min_length=1),
    scraper: ProductScraper = Depends(get_scraper),
):
    """Scrape the product page at url."""
    return ProductPageResponse.model_validate(scraper.scrape_product(url))


@app.post("/products/resolve", response_model=ResolveResponse, tags=["Products"])
def resolve_product(request: ResolveRequest, scraper: ProductScraper = Depends(get_scraper)):
    """Resolve a product page URL through the site search."""
    basic_info = CoreBasicInfo(name=request.name, brand=request.brand, url=request.url)
    return ResolveResponse(url=scraper.search_product(basic_info))


@app.post("/products/card-data", response_model=ProductCardDataResponse, tags=["Products"])
def product_card_data(request: ResolveRequest, scraper: ProductScraper = Depends(get_scraper)):
    """Images and description from the page of the resolved product."""
    basic_info = CoreBasicInfo(name=request.name, brand=request.brand, url=request.url)
    return ProductCardDataResponse.model_validate(scraper.search_product_card_data(basic_info))


@app.post("/cards/filter", response_model=FilterResponse, tags=["Cards"])
def filter_cards(request: FilterRequest, scraper: ProductScraper = Depends(get_scraper)):
    """Filter the product cards of a catalog section or of search results."""
    predicate = build_predicate(request.image, request.description, request.mode)
    extractor = scraper.list_extractor(request.data)

    if request.source == "catalog":
        cards = scraper.filter_product_cards_from_catalog(request.criteria, extractor, predicate)
    else:
        cards = scraper.filter_product_cards_from_search(request.criteria, extractor, predicate)

    if request.data == "basic-info":
        cards = [BasicInfo.model_validate(card) for card in cards]
    return FilterResponse(cards=cards, count=len(cards))


@app.post("/abort", response_model=StatusResponse, tags=["Control"])
async def abort(scraper: ProductScraper = Depends(get_scraper)):
    """Abort every operation running under the current cancellation token."""
    scraper.abort()
    return StatusResponse(success=True, message="Running operations aborted")


@app.post("/reset", response_model=StatusResponse, tags=["Control"])
async def reset(scraper: ProductScraper = Depends(get_scraper)):
    """Issue a fresh cancellation token so that new operations can run."""
    scraper.reset()
    return StatusResponse(success=True, message="Scraper reset")


# Error handlers
@app.exception_handler(ScraperError)
async def scraper_exception_handler(_request, exc):
    for error_class, status_code in ERROR_STATUS:
        if isinstance(exc, error_class):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc)).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(_request, exc):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def general_exception_handler(_request, exc):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Unexpected error: {str(exc)}"},
    )


# Run with: uvicorn product_scraper.api.main:app --reload
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("product_scraper.api.main:app", host="0.0.0.0", port=8000, reload=True)
