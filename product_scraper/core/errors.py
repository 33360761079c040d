# Exceptions raised by the scraper core.
# Callers can branch on the subclass: misconfiguration, broken selectors,
# unreachable pages, cancellation, or a product that cannot be resolved.


class ScraperError(Exception):
    """Base class for all scraper errors."""


class ConfigurationError(ScraperError, ValueError):
    """Configuration or call arguments are malformed."""


class SelectionError(ScraperError):
    """A selector matched nothing or parallel selections disagree."""


class InvalidUrlError(SelectionError, ValueError):
    """A URL could not be parsed or made absolute."""


class FetchError(ScraperError):
    """A page could not be fetched or parsed."""

    def __init__(self, url: str):
        super().__init__(f"{url} is not a valid URL or is currently unavailable")
        self.url = url


class OperationCancelled(ScraperError):
    """The operation was aborted through its cancellation token."""


class ResolutionError(ScraperError):
    """A product could not be resolved from search results."""


class SearchEngineError(ResolutionError):
    """The site's search returned no candidates at all."""


class NoMatchError(ResolutionError):
    """No search result is close enough to the requested product."""
