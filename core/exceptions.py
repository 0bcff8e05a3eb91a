"""Custom exception hierarchy for the request executor.

Transport failures (timeouts, refused connections) are not part of this
hierarchy: they surface as the original ``httpx`` exceptions.
"""


class HttpInstantError(Exception):
    """Base exception for all executor errors."""


class ConfigurationError(HttpInstantError):
    """Raised when configuration is missing or invalid."""


class WrappedError(HttpInstantError):
    """Error that carries an underlying cause.

    Attributes:
        message: Error message
        cause: The exception that triggered this error (optional)
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class UnsupportedContentType(HttpInstantError):
    """Request body cannot be serialized for the given content type."""

    def __init__(self, content_type: str) -> None:
        super().__init__(f"unsupported Content-Type: {content_type}")
        self.content_type = content_type


class SerializationError(WrappedError):
    """Request body encoding failed."""


class RequestConstructionError(WrappedError):
    """Method or URL could not be turned into a request."""


class ResponseReadError(WrappedError):
    """Response body could not be read."""


class ResponseDecodeError(WrappedError):
    """Response body could not be decoded in the matched format."""


class UnsupportedResponseFormat(WrappedError):
    """Unrecognized response content type and the JSON fallback failed."""

    def __init__(self, content_type: str, cause: BaseException | None = None) -> None:
        super().__init__(
            f"unsupported Content-Type ({content_type}) and failed JSON fallback",
            cause,
        )
        self.content_type = content_type


class TargetError(HttpInstantError):
    """Decoded data does not fit the response target."""
