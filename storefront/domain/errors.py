# storefront/domain/errors.py
from typing import Any, Dict


class StorefrontError(Exception):
    """Base for every error the services raise on purpose.

    ``status_code`` is what the API layer answers with, ``details`` carries
    field-level information for the client.
    """

    status_code = 500

    def __init__(self, message: str, details: Dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(StorefrontError):
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404


class ConflictError(StorefrontError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    pass


class ResourceExhaustedError(ConflictError):
    pass


class ExternalServiceError(StorefrontError):
    status_code = 502


class PersistenceError(StorefrontError):
    status_code = 500
