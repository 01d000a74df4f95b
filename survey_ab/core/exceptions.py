class SurveyServiceError(Exception):
    """Base class for errors raised by the survey service."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(SurveyServiceError):
    """An experiment is misconfigured (e.g. it has no variants) and cannot be served."""


class NotFoundError(SurveyServiceError):
    """The requested experiment or survey does not exist."""


class StorageError(SurveyServiceError):
    """A persistence operation failed. Never retried by the service."""
