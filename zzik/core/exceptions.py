"""
Custom Exceptions - ZZIK Scoring Service
zzik/core/exceptions.py

Exception classes for the service layer. The scorers themselves do not
raise on typed input; these cover collaborators and request parameters.
"""


class ScoringException(Exception):
    """Base exception for the scoring service."""

    pass


class DataSourceException(ScoringException):
    """Popup feed or profile store unavailable."""

    def __init__(self, operation: str, message: str = "Data source unavailable"):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}")


class EmbeddingProviderError(ScoringException):
    """Embedding call failed. Callers treat this as 'no vector'."""

    def __init__(self, message: str = "Embedding provider request failed"):
        self.message = message
        super().__init__(message)


class InvalidScoringInputException(ScoringException):
    """Request parameter outside the accepted range."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
