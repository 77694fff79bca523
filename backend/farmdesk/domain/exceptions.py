"""Domain-specific exceptions — framework-independent.

Shared by the backend services and the ``farmdesk.client`` package so both
sides of the wire speak the same error taxonomy.
"""


class FarmDeskError(Exception):
    """Base class for every error surfaced by FarmDesk."""


class TransportError(FarmDeskError):
    """Raised when the backend cannot be reached or answers with a server error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthError(FarmDeskError):
    """Raised when the session is missing, malformed or expired."""

    def __init__(self, message: str = "Authentication required"):
        self.message = message
        super().__init__(message)


class ValidationError(FarmDeskError):
    """Raised when a payload is rejected for missing or malformed fields."""

    def __init__(self, resource: str, errors: list[str]):
        self.resource = resource
        self.errors = errors
        super().__init__(f"Invalid {resource} payload: {'; '.join(errors)}")


class NotFoundError(FarmDeskError):
    """Raised when a record does not exist or is not owned by the caller."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class UpstreamServiceError(FarmDeskError):
    """Raised when a third-party API (completion, weather) fails.

    Provider-agnostic — works for OpenRouter, OpenAI, WeatherAPI, etc.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429
