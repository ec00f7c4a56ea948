"""
Application errors.

ConfigurationError aborts startup before any request is handled. SearchError and
CompletionError mark a single failed gateway call; the classifier absorbs them
per category, the web research pipeline lets them propagate.
"""


class ConfigurationError(Exception):
    """Raised when one or more required API keys are not configured."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        self.message = f"Missing required configuration: {', '.join(self.missing)}"
        super().__init__(self.message)


class SearchError(Exception):
    """Raised when a search API returns an error status or an unusable response envelope."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CompletionError(Exception):
    """Raised when a completion is empty or cannot be parsed as the requested structure."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
