"""
Custom exceptions for the classbook backend.
These provide consistent error handling across the application.
"""


class ClassbookException(Exception):
    """Base exception for all classbook exceptions."""

    status_code = 500


class ValidationException(ClassbookException):
    """Raised for validation errors."""

    status_code = 400


class StoreException(ClassbookException):
    """Base exception for attendance store errors."""

    pass


class ConfigurationMissingException(StoreException):
    """Raised when the configured store lacks its required settings."""

    pass


class DocumentUnavailableException(StoreException):
    """Raised when the attendance document does not exist yet."""

    pass


class StoreUnreachableException(StoreException):
    """Raised when the store could not be reached while loading."""

    pass


class TransportFailureException(StoreException):
    """Raised when a write could not be delivered to the store."""

    pass


class ConflictException(StoreException):
    """Raised when the stored document moved since it was last loaded."""

    status_code = 409


class UnauthenticatedException(StoreException):
    """Raised when the store rejects the configured credentials."""

    status_code = 401


class ForbiddenException(StoreException):
    """Raised when the credentials cannot access the configured destination."""

    status_code = 403


class StoreIOException(StoreException):
    """Raised when the local document file cannot be read or written."""

    pass


class MalformedDocumentException(StoreException):
    """Raised when stored content is not a valid attendance document."""

    pass
