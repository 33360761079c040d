import os
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables with defaults.

    Site-specific selectors and thresholds live in a ScraperConfig file;
    this class only holds what differs between deployments: where that file
    is, how the HTTP client identifies itself and how politely it fetches.
    """

    # Project metadata
    PROJECT_NAME = "Product Scraper"
    PROJECT_VERSION = "0.1.0"

    # Site configuration
    CONFIG_PATH = os.getenv("SCRAPER_CONFIG_PATH", "scraper.json")

    # HTTP client
    USER_AGENT = os.getenv("SCRAPER_USER_AGENT", "ProductScraper/0.1.0 (Research Project)")
    REQUEST_TIMEOUT = float(os.getenv("SCRAPER_REQUEST_TIMEOUT", "30"))
    REQUEST_DELAY_MIN = float(os.getenv("SCRAPER_REQUEST_DELAY_MIN", "1"))
    REQUEST_DELAY_MAX = float(os.getenv("SCRAPER_REQUEST_DELAY_MAX", "3"))

    # Logging
    LOG_LEVEL = os.getenv("SCRAPER_LOG_LEVEL", "INFO")

    @property
    def REQUEST_DELAY(self) -> tuple:
        """Bounds of the random pause before each request, in seconds."""
        low = max(self.REQUEST_DELAY_MIN, 0.0)
        return low, max(self.REQUEST_DELAY_MAX, low)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


# For direct access in other modules
settings = get_settings()
