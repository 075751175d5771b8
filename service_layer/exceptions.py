"""Exceptions raised by service layer collaborators."""

from typing import Any, Optional, Sequence


class ServiceLayerError(Exception):
    """Base class for service layer errors."""


class NotStartedError(ServiceLayerError, RuntimeError):
    """Raised when the façade is used before start()."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not available. Call ServiceLayer.start() first.")
        self.resource = resource


class HasuraUnavailableError(ServiceLayerError):
    """Raised when Hasura was never configured for this process."""


class HasuraRequestError(ServiceLayerError):
    """Raised when Hasura answers with an HTTP error or GraphQL errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[Sequence[Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = list(errors or [])
