from typing import Any


class ReporterError(Exception):
    """
    ReporterError is the base for every failure that aborts a
    reporting run. The details mapping carries the context needed
    for diagnosis (origin id, url, status code...).
    """

    def __init__(
        self,
        message: "str",
        details: "dict[str, Any] | None" = None,
    ) -> "None":
        super().__init__(message)
        self.message = message
        self.details: "dict[str, Any]" = details or {}

    def __str__(self) -> "str":
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ParseError(ReporterError):
    """raised on a malformed month string."""


class ConfigError(ReporterError):
    """raised on a missing or malformed configuration."""


class URLError(ReporterError):
    """raised when a console URL cannot be built."""


class TransportError(ReporterError):
    """raised on network-level failures talking to the console."""


class AuthenticationError(ReporterError):
    """
    raised when the console rejects the login form.
    """

    def __init__(
        self,
        message: "str",
        status_code: "int",
        details: "dict[str, Any] | None" = None,
    ) -> "None":
        super().__init__(message, {"status_code": status_code, **(details or {})})
        self.status_code = status_code


class RemoteError(ReporterError):
    """
    raised when a data endpoint answers with an unexpected status
    or reports a failure in its envelope.
    """

    def __init__(
        self,
        message: "str",
        status_code: "int",
        details: "dict[str, Any] | None" = None,
    ) -> "None":
        super().__init__(message, {"status_code": status_code, **(details or {})})
        self.status_code = status_code


class DecodeError(ReporterError):
    """raised when a response body is not the expected JSON."""
