from unittest.mock import MagicMock

import pytest
import requests

from product_scraper.core.errors import FetchError, OperationCancelled
from product_scraper.core.scrapers.web_fetcher import CHUNK_SIZE, WebFetcher

URL = "https://shop.test/p/1"


def make_session(chunks=(b"<html><body><h1>Foo</h1></body></html>",), encoding="utf-8"):
    response = MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = iter(chunks)
    response.encoding = encoding

    session = MagicMock()
    session.headers = {}
    session.get.return_value = response
    return session


def make_fetcher(session, **kwargs):
    kwargs.setdefault("delay", (0, 0))
    return WebFetcher(user_agent="TestAgent/1.0", timeout=5, session=session, **kwargs)


def test_fetches_and_parses_the_page(token):
    session = make_session(chunks=[b"<html><body><h1>F", b"oo</h1></body></html>"])

    document = make_fetcher(session).get_page(URL, token)

    assert document.select_one("h1").get_text() == "Foo"
    session.get.assert_called_once_with(URL, timeout=5, stream=True)
    session.get.return_value.iter_content.assert_called_once_with(chunk_size=CHUNK_SIZE)


def test_identifies_itself():
    session = make_session()

    make_fetcher(session)

    assert session.headers["User-Agent"] == "TestAgent/1.0"
    assert "text/html" in session.headers["Accept"]


def test_declared_encoding_is_used(token):
    session = make_session(chunks=["<h1>Café</h1>".encode("cp1252")], encoding="cp1252")

    document = make_fetcher(session).get_page(URL, token)

    assert document.select_one("h1").get_text() == "Café"


def test_error_status_is_a_fetch_error(token):
    session = make_session()
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404 Client Error")

    with pytest.raises(FetchError) as excinfo:
        make_fetcher(session).get_page(URL, token)

    assert excinfo.value.url == URL
    assert "currently unavailable" in str(excinfo.value)


@pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_transport_failure_is_a_fetch_error(token, error):
    session = make_session()
    session.get.side_effect = error

    with pytest.raises(FetchError):
        make_fetcher(session).get_page(URL, token)


def test_cancelled_token_prevents_the_request(token):
    session = make_session()
    token.cancel()

    with pytest.raises(OperationCancelled):
        make_fetcher(session).get_page(URL, token)
    session.get.assert_not_called()


def test_cancellation_stops_the_download(token):
    session = make_session()
    read = []

    def chunks(chunk_size):
        for chunk in (b"<html>", b"<body>", b"</body></html>"):
            read.append(chunk)
            token.cancel()
            yield chunk

    session.get.return_value.iter_content.side_effect = chunks

    with pytest.raises(OperationCancelled):
        make_fetcher(session).get_page(URL, token)
    assert read == [b"<html>"]


def test_pauses_before_each_request(token):
    session = make_session()
    token.wait = MagicMock()

    make_fetcher(session, delay=(0.5, 0.5)).get_page(URL, token)

    token.wait.assert_called_once_with(0.5)


def test_no_pause_without_delay(token):
    token.wait = MagicMock()

    make_fetcher(make_session()).get_page(URL, token)

    token.wait.assert_not_called()
