"""Timed HTTP requests with retry, backoff and response validation.

Every provider adapter goes through :func:`execute`. One call issues up to
``retries + 1`` attempts, each bounded by ``timeout`` seconds. Transport
failures and 5xx responses are retried with exponential backoff; 4xx
responses and shape violations are raised immediately.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import requests
from requests.structures import CaseInsensitiveDict

from errors import (
    AuthenticationError,
    HttpError,
    QuotaError,
    RequestTimeoutError,
    ValidationError,
    context_prefix,
    wrap_error,
)
from validation import validate

logger = logging.getLogger(__name__)

USER_AGENT = "OpenCode-Status-Plugin/1.0"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3
_MAX_ERROR_BODY = 500


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to issue and check one logical request."""

    url: str
    context: str
    shape: Any = None
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    json_body: Any = None
    form: Mapping[str, str] | None = None
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    # Turns a 2xx response into raw data; defaults to decode_body.
    decode: Callable[[requests.Response], Any] | None = None
    # Friendly message raised as AuthenticationError on HTTP 401.
    auth_error: str | None = None


def backoff_delay(retry_index: int) -> float:
    """Seconds to wait before retry ``retry_index`` (0-based): 1, 2, 4, ..."""
    return 2.0**retry_index


def is_retryable(status: int | None) -> bool:
    if status is None:
        return True
    return 500 <= status < 600


def decode_body(response: requests.Response) -> Any:
    """Decode JSON when the content type says so, raw text otherwise."""
    content_type = response.headers.get("content-type") or ""
    if "application/json" in content_type:
        return response.json()
    return response.text


def build_headers(headers: Mapping[str, str]) -> dict[str, str]:
    merged = CaseInsensitiveDict(headers)
    if "user-agent" not in merged:
        merged["User-Agent"] = USER_AGENT
    return dict(merged)


def _redact(headers: Mapping[str, str]) -> dict[str, str]:
    redacted = {}
    for key, value in headers.items():
        if key.lower() in ("authorization", "x-api-key", "x-goog-api-key"):
            redacted[key] = "***"
        else:
            redacted[key] = value
    return redacted


def _status_error(response: requests.Response, descriptor: RequestDescriptor) -> QuotaError:
    if response.status_code == 401 and descriptor.auth_error:
        return AuthenticationError(descriptor.auth_error, status=401)
    body = (response.text or "")[:_MAX_ERROR_BODY]
    return HttpError(
        f"HTTP error {response.status_code}: {response.reason or ''} - {body}",
        status=response.status_code,
    )


def _decode_and_validate(response: requests.Response, descriptor: RequestDescriptor) -> Any:
    decode = descriptor.decode or decode_body
    try:
        raw = decode(response)
    except ValueError as e:
        raise ValidationError(
            f"{context_prefix(descriptor.context)} Could not decode response: {e}"
        ) from e
    return validate(raw, descriptor.shape, descriptor.context)


def execute(
    descriptor: RequestDescriptor,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """Issue ``descriptor`` and return its validated payload.

    Raises:
        AuthenticationError: 401 with a mapped friendly message.
        HttpError: 4xx, or 5xx/transport failure after retries run out.
        RequestTimeoutError: the final attempt timed out.
        ValidationError: the 2xx payload has the wrong shape.
    """
    send = session.request if session is not None else requests.request
    headers = build_headers(descriptor.headers)
    kwargs: dict[str, Any] = {"headers": headers, "timeout": descriptor.timeout}
    if descriptor.json_body is not None:
        kwargs["json"] = descriptor.json_body
    if descriptor.form is not None:
        kwargs["data"] = dict(descriptor.form)

    last_error: QuotaError | None = None
    attempts = descriptor.retries + 1

    for attempt in range(attempts):
        logger.debug(
            "%s %s %s (attempt %d/%d) headers=%s",
            descriptor.context,
            descriptor.method,
            descriptor.url,
            attempt + 1,
            attempts,
            _redact(headers),
        )
        try:
            response = send(descriptor.method, descriptor.url, **kwargs)
        except requests.Timeout:
            last_error = RequestTimeoutError(
                f"Request timeout ({descriptor.timeout:g}s)"
            )
        except requests.RequestException as e:
            last_error = HttpError(f"Network error: {e}")
        else:
            if 200 <= response.status_code < 300:
                try:
                    return _decode_and_validate(response, descriptor)
                except QuotaError as e:
                    raise wrap_error(e, descriptor.context)
            error = _status_error(response, descriptor)
            if not is_retryable(response.status_code):
                raise wrap_error(error, descriptor.context)
            last_error = error

        if attempt < descriptor.retries:
            delay = backoff_delay(attempt)
            logger.warning(
                "%s request failed (attempt %d/%d): %s. Retrying in %gs...",
                descriptor.context,
                attempt + 1,
                attempts,
                last_error,
                delay,
            )
            sleep(delay)

    raise wrap_error(last_error or HttpError("Unknown error occurred"), descriptor.context)
