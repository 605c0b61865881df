class UnifiManagerError(Exception):
    """Base exception for unifi_client_manager errors."""

    pass


class UnifiConfigurationError(UnifiManagerError):
    """Raised when required settings such as the controller URL or API key are missing or invalid."""

    pass


class UnifiAuthenticationError(UnifiManagerError):
    """Raised when the controller rejects the API key or the session cannot be verified."""

    pass


class UnifiRetrievalError(UnifiManagerError):
    """Raised when every client listing endpoint has failed."""

    pass


class UnifiOperationError(UnifiManagerError):
    """Raised when every block/unblock endpoint candidate has failed."""

    pass


class UnifiValidationError(UnifiManagerError):
    """Raised when a request or metadata update is malformed."""

    pass
