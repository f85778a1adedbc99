class ReviewScraperError(Exception):
    """Base class for errors that abort a scrape run."""


class NavigationError(ReviewScraperError):
    """The product page could not be loaded. Nothing can be scraped after this."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason
