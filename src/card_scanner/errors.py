"""Exception types raised by card scanner components."""


class CardScannerError(Exception):
    """Base class for all card scanner errors."""


class ConfigurationError(CardScannerError):
    """Missing or invalid credentials for an external service."""


class InvalidCredentialsError(ConfigurationError):
    """The external service rejected the configured credentials."""


class TransportError(CardScannerError):
    """Network or service failure. Retry by re-running the same action."""


class ServiceError(TransportError):
    """The external service answered with an error."""


class UnknownServiceError(TransportError):
    """An unexpected failure while talking to an external service."""


class StorageError(TransportError):
    """The local storage file could not be written."""


class RecordNotFoundError(CardScannerError):
    """No record exists with the requested identity."""


class ValidationError(CardScannerError):
    """A column configuration change was rejected. State is unchanged."""


class ShortIdExhaustedError(CardScannerError):
    """No free short id was found within the attempt limit."""
