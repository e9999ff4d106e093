"""Exceptions raised by the Secret Server client."""

from __future__ import annotations


class TSSError(Exception):
    pass


class ConfigurationError(TSSError):
    """Invalid configuration or malformed input. Raised before any I/O."""


class UnknownResourceError(ConfigurationError):
    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"unknown resource: {resource}")


class TransportError(TSSError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: bytes = b""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        text = body.decode("utf-8", errors="replace")
        super().__init__(f"{status_code} {reason}: {text}")


class ResponseParseError(TSSError):
    """A response body could not be parsed. The raw bytes are kept for diagnosis."""

    def __init__(self, message: str, raw: bytes):
        self.raw = raw
        super().__init__(f"{message}: {raw[:255]!r}")


class SchemaMismatchError(TSSError):
    """A secret field does not resolve to a field on its template."""


class BusinessRuleError(TSSError):
    pass


class FileFieldError(TSSError):
    """Reconciling a file field failed."""

    def __init__(self, slug: str, cause: Exception):
        self.slug = slug
        super().__init__(f"file field '{slug}': {cause}")
