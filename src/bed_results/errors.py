"""Exception hierarchy for the results scraper."""


class ScraperError(Exception):
    """Base class for every error raised by this package."""
    pass


class InvalidIdentifierError(ScraperError, ValueError):
    """Raised when a roll number does not match the portal's format.

    Input errors are rejected before any browser or OCR work starts and are
    never retried.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Invalid roll number format: {identifier!r}")


class BatchValidationError(ScraperError, ValueError):
    """Raised when a batch request is empty, too large or malformed."""
    pass


class InvalidCaptchaImageError(ScraperError, ValueError):
    """Raised when an empty captcha image is handed to the resolver."""
    pass


class RecognitionEngineError(ScraperError):
    """Raised when an OCR engine handle cannot be constructed."""
    pass


class SessionError(ScraperError):
    """Raised when the browser session cannot be prepared or used."""
    pass
