from typing import List
from urllib.parse import urljoin, urlparse

from product_scraper.core.errors import InvalidUrlError


def get_base_url(url: str) -> str:
    """Reduce a URL to its scheme and host, e.g. "https://shop.test"."""
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidUrlError(f"{url} is not a valid URL") from e

    if not parsed.scheme or not parsed.netloc:
        raise InvalidUrlError(f"{url} is not a valid URL")
    return f"{parsed.scheme}://{parsed.netloc}"


def convert_to_absolute(urls: List[str], base_url: str) -> List[str]:
    """Convert relative URLs to absolute ones.

    Args:
        urls: Relative or absolute URLs; absolute ones are kept as they are
        base_url: Any URL of the site, reduced to its scheme and host

    Raises:
        InvalidUrlError: If base_url is not a URL or a URL cannot be joined to it
    """
    validated_base_url = get_base_url(base_url)

    absolute = []
    for url in urls:
        try:
            absolute.append(urljoin(validated_base_url + "/", url))
        except ValueError as e:
            raise InvalidUrlError(f"{url} and {base_url} do not represent a valid URL") from e
    return absolute
