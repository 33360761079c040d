import pytest

from product_scraper.core.errors import (
    ConfigurationError,
    FetchError,
    OperationCancelled,
    SelectionError,
)
from product_scraper.core.extraction.selectors import extract_text_contents
from product_scraper.core.models import BasicInfo, PaginationSpec
from product_scraper.core.pagination import Paginator
from product_scraper.core.scrapers.static_fetcher import StaticFetcher

PREFIX = "https://shop.test/list?page="


def items_page(*items):
    return "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"


def extract_items(document):
    return extract_text_contents(document, "li")


@pytest.fixture
def paged():
    return StaticFetcher({
        PREFIX + "1": items_page("a", "b"),
        PREFIX + "2": items_page("c", "d"),
        PREFIX + "3": items_page("e"),
    })


def test_accumulates_until_a_page_has_nothing_to_extract(paged, token):
    paged.add_page(PREFIX + "4", "<p>No products</p>")

    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract_items, token)

    assert result == ["a", "b", "c", "d", "e"]
    assert paged.requested[-1] == PREFIX + "4"


def test_later_fetch_failure_ends_pagination(paged, token):
    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract_items, token)

    assert result == ["a", "b", "c", "d", "e"]
    assert len(paged.requested) == 4


def test_first_page_extraction_failure_propagates(token):
    fetcher = StaticFetcher({PREFIX + "1": "<p>No products</p>"})

    with pytest.raises(SelectionError):
        Paginator(fetcher).iterate(PaginationSpec(url=PREFIX), extract_items, token)


def test_first_page_fetch_failure_propagates(token):
    with pytest.raises(FetchError):
        Paginator(StaticFetcher()).iterate(PaginationSpec(url=PREFIX), extract_items, token)


def test_first_page_failure_propagates_when_starting_later(paged, token):
    with pytest.raises(FetchError):
        Paginator(paged).iterate(PaginationSpec(url=PREFIX, first=7), extract_items, token)


def test_repeated_page_stops_without_its_contribution(paged, token):
    # Servers re-serving the last page for numbers past the end
    paged.add_page(PREFIX + "4", items_page("c", "d"))
    paged.add_page(PREFIX + "5", items_page("f"))

    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract_items, token)

    assert result == ["a", "b", "c", "d", "e"]
    assert PREFIX + "5" not in paged.requested


def test_repeated_page_is_detected_by_value(token):
    fetcher = StaticFetcher({
        PREFIX + "1": items_page("Foo"),
        PREFIX + "2": items_page("Bar"),
        PREFIX + "3": items_page("Foo"),
    })

    def extract(document):
        return [BasicInfo(name=name) for name in extract_items(document)]

    result = Paginator(fetcher).iterate(PaginationSpec(url=PREFIX), extract, token)

    assert result == [BasicInfo(name="Foo"), BasicInfo(name="Bar")]


def test_last_page_bounds_iteration(paged, token):
    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX, first=2, last=3), extract_items, token)

    assert result == ["c", "d", "e"]
    assert paged.requested == [PREFIX + "2", PREFIX + "3"]


def test_last_before_first_yields_nothing(paged, token):
    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX, first=3, last=2), extract_items, token)

    assert result == []
    assert paged.requested == []


def test_empty_page_ends_pagination(paged, token):
    def extract(document):
        items = extract_items(document)
        return [] if items == ["c", "d"] else items

    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract, token)

    assert result == ["a", "b"]


def test_empty_page_inside_a_bounded_range_is_skipped(paged, token):
    def extract(document):
        items = extract_items(document)
        return [] if items == ["c", "d"] else items

    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX, last=3), extract, token)

    assert result == ["a", "b", "e"]
    assert paged.requested[-1] == PREFIX + "3"


def test_any_later_page_failure_ends_pagination(paged, token):
    def extract(document):
        items = extract_items(document)
        if items == ["c", "d"]:
            raise ValueError("unexpected markup")
        return items

    result = Paginator(paged).iterate(PaginationSpec(url=PREFIX, last=3), extract, token)

    assert result == ["a", "b"]
    assert len(paged.requested) == 2


def test_any_first_page_failure_propagates(paged, token):
    def extract(document):
        raise ValueError("unexpected markup")

    with pytest.raises(ValueError):
        Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract, token)


def test_cancellation_is_never_taken_for_the_end(paged, token):
    def extract(document):
        items = extract_items(document)
        token.cancel()
        return items

    with pytest.raises(OperationCancelled):
        Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract, token)


def test_cancellation_raised_on_a_later_page_propagates(paged, token):
    def extract(document):
        items = extract_items(document)
        if items == ["c", "d"]:
            raise OperationCancelled("Operation aborted")
        return items

    with pytest.raises(OperationCancelled):
        Paginator(paged).iterate(PaginationSpec(url=PREFIX), extract, token)


def test_extractor_must_be_callable(paged, token):
    with pytest.raises(ConfigurationError):
        Paginator(paged).iterate(PaginationSpec(url=PREFIX), "li", token)


@pytest.mark.parametrize("kwargs", [
    {"url": 5},
    {"url": PREFIX, "first": "1"},
    {"url": PREFIX, "last": 2.5},
    {"url": PREFIX, "first": True},
])
def test_pagination_spec_validates_types(kwargs):
    with pytest.raises(ConfigurationError):
        PaginationSpec(**kwargs)
