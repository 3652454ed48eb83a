"""
Exception types shared across ingestion, retrieval and chat.

Batch jobs catch these per item and keep going; request handlers let them
propagate to the HTTP layer.
"""


class FredRelayError(Exception):
    """Base class for all errors raised by this project."""


class ConfigurationError(FredRelayError):
    """A required credential or URL is missing. Never retried."""


class UpstreamAPIError(FredRelayError):
    """An external service answered with a non-2xx status or could not be reached."""

    def __init__(self, service: str, status_code: int | None, message: str = ""):
        self.service = service
        self.status_code = status_code
        if status_code is None:
            detail = f"{service} request failed"
        else:
            detail = f"{service} returned HTTP {status_code}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


class FormatError(FredRelayError):
    """An external response did not have the expected shape."""


class NormalizationError(FredRelayError):
    """An embedding vector could not be scaled to unit length."""


class EmptyResponseError(FredRelayError):
    """A chat provider returned no usable text."""


class AllModelsFailedError(FredRelayError):
    """Every model candidate in a fallback round failed."""

    def __init__(self, attempted: list[str], last_error: str | None = None):
        self.attempted = list(attempted)
        self.last_error = last_error
        if attempted:
            message = f"All models failed ({', '.join(attempted)})."
        else:
            message = "No eligible models available."
        if last_error:
            message = f"{message} Last error: {last_error}"
        super().__init__(message)
