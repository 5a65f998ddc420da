"""Custom exception classes for the scraper."""


class OdaScraperException(Exception):
    """Base exception for all scraper errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ScraperError(OdaScraperException):
    """Raised when scraping a page fails."""

    def __init__(self, target: str, message: str):
        self.target = target
        super().__init__(f"Scraper error for {target}: {message}")


class BrowserNotStartedError(OdaScraperException):
    """Raised when a page is requested before the browser was launched."""

    def __init__(self):
        super().__init__("Browser has not been launched")


class EventHandlerError(OdaScraperException):
    """Raised by the event bus when a subscribed handler fails."""

    def __init__(self, event_type: str, error: BaseException):
        self.event_type = event_type
        self.error = error
        super().__init__(f"Handler for '{event_type}' failed: {error}")


class PersistenceError(OdaScraperException):
    """Raised when a database operation fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Failed to {operation}: {message}")
