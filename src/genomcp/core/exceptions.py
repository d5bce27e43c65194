# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for genomcp."""


class GenomcpError(Exception):
    """Base exception for all genomcp errors."""


class ConfigurationError(GenomcpError):
    """Invalid or missing configuration."""


class StorageError(GenomcpError):
    """Cache substrate or durable storage operation failed."""


class SerializationError(GenomcpError):
    """A value could not be encoded to, or decoded from, its stored form."""


class UpstreamError(GenomcpError):
    """An upstream data source returned an error."""

    def __init__(self, message: str, source: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class UpstreamNotFound(UpstreamError):
    """The data source affirmatively reports that the record does not exist."""


class UpstreamTransientError(UpstreamError):
    """Network failure, rate limit or 5xx from a data source."""


class DeadlineExceededError(GenomcpError, TimeoutError):
    """An operation did not complete before its deadline."""
