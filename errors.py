"""Error types raised while querying provider quotas.

Every error that leaves the request executor carries a ``[<context>] ``
prefix naming the provider, so failures can be listed in the report
without each adapter re-labelling them.
"""

from __future__ import annotations


class QuotaError(Exception):
    """Base class for provider query errors."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class HttpError(QuotaError):
    """Non-2xx response, or a transport failure once retries are exhausted."""


class RequestTimeoutError(HttpError, TimeoutError):
    """The last attempt did not complete before its deadline."""


class AuthenticationError(QuotaError):
    """The vendor rejected the stored credential."""


class ValidationError(QuotaError):
    """A decoded payload does not match the expected shape."""


def context_prefix(context: str) -> str:
    return f"[{context}]"


def wrap_error(error: BaseException, context: str) -> QuotaError:
    """Return ``error`` as a QuotaError whose message starts with ``[context]``.

    Already-prefixed QuotaErrors are returned unchanged. Other exceptions
    become an HttpError carrying the original message.
    """
    prefix = context_prefix(context)
    if isinstance(error, QuotaError):
        if error.message.startswith(prefix):
            return error
        wrapped = type(error)(f"{prefix} {error.message}", status=error.status)
    else:
        message = str(error) or type(error).__name__
        if message.startswith(prefix):
            wrapped = HttpError(message)
        else:
            wrapped = HttpError(f"{prefix} {message}")
    wrapped.__cause__ = error
    return wrapped
