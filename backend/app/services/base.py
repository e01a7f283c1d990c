"""
Base Service Interface

All services inherit from BaseService and report failures as ServiceError
subclasses. Each error class carries the HTTP status the API answers with.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all services.

    A service takes one validated schema in and returns one schema out;
    helpers beyond `execute` are free-form.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name used in logs and ServiceError.service_name."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service's main operation.

        Raises:
            ServiceError: If a collaborator (provider, LLM) fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the service can take requests (keys configured, etc.)."""
        pass


class ServiceError(Exception):
    """A service could not complete a request."""

    http_status = 503

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ValidationError(ServiceError):
    """Provider rejected the request: unknown symbol or invalid call."""

    http_status = 404


class ExternalAPIError(ServiceError):
    """Provider call failed or returned an unexpected payload."""

    http_status = 502


class RateLimitError(ServiceError):
    """Provider quota exceeded."""

    http_status = 429
