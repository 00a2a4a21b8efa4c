"""Shared types for provider quota adapters.

Each platform is described by a :class:`ProviderConfig` value and run
through :func:`query_provider`, which owns credential lookup, the request
(through ``http_client.execute``) and the conversion of every failure into
a :class:`QueryResult`.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional

import requests

import http_client
from credentials import CredentialStore
from errors import QuotaError, wrap_error
from http_client import RequestDescriptor
from i18n import Locale

logger = logging.getLogger(__name__)


class QueryStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    ABSENT = "absent"


@dataclass(frozen=True)
class QueryResult:
    """Outcome of one provider query.

    SUCCESS carries ``output``, FAILURE carries ``error`` and ABSENT (no
    credentials configured) carries neither.
    """

    status: QueryStatus
    output: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, output: str) -> "QueryResult":
        return cls(QueryStatus.SUCCESS, output=output)

    @classmethod
    def failed(cls, error: str) -> "QueryResult":
        return cls(QueryStatus.FAILURE, error=error)

    @classmethod
    def absent(cls) -> "QueryResult":
        return cls(QueryStatus.ABSENT)

    @property
    def success(self) -> bool:
        return self.status is QueryStatus.SUCCESS

    @property
    def is_absent(self) -> bool:
        return self.status is QueryStatus.ABSENT


@dataclass(frozen=True)
class ApiKeyCredential:
    key: str
    group_id: Optional[str] = None


@dataclass(frozen=True)
class QueryContext:
    """Per-invocation settings handed to every adapter."""

    locale: Locale = Locale()
    timeout: float = 10.0
    retries: int = http_client.DEFAULT_RETRIES
    session: Optional[requests.Session] = None
    sleep: Callable[[float], None] = time.sleep

    def descriptor(self, url: str, context: str, **kwargs) -> RequestDescriptor:
        kwargs.setdefault("timeout", self.timeout)
        kwargs.setdefault("retries", self.retries)
        return RequestDescriptor(url=url, context=context, **kwargs)

    def execute(self, descriptor: RequestDescriptor) -> Any:
        return http_client.execute(descriptor, session=self.session, sleep=self.sleep)


@dataclass(frozen=True)
class ProviderConfig:
    """Data-driven description of one platform.

    Simple platforms set ``base_url``/``endpoint``/``auth_header``/``schema``/
    ``transform`` and are fetched with a single request. Platforms needing
    several calls supply ``fetch`` instead, which returns the report text.
    """

    id: str
    name: str
    title_key: str
    credential: Callable[[CredentialStore], Any]
    base_url: str = ""
    endpoint: str = ""
    auth_header: Optional[Callable[[Any], dict]] = None
    schema: Any = None
    transform: Optional[Callable[[Any, Any, Locale], str]] = None
    decode: Optional[Callable[[requests.Response], Any]] = None
    method: str = "GET"
    fallback_url: Optional[str] = None
    auth_error_key: Optional[str] = None
    fetch: Optional[Callable[[Any, QueryContext], str]] = None
    # Per-attempt timeout overriding the configured one.
    timeout: Optional[float] = None

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    def build_descriptor(self, credential: Any, ctx: QueryContext) -> RequestDescriptor:
        headers = self.auth_header(credential) if self.auth_header else {}
        auth_error = ctx.locale.t(self.auth_error_key) if self.auth_error_key else None
        extra = {"timeout": self.timeout} if self.timeout is not None else {}
        return ctx.descriptor(
            self.url,
            self.name,
            shape=self.schema,
            method=self.method,
            headers=headers,
            decode=self.decode,
            auth_error=auth_error,
            **extra,
        )


def api_key_from_auth(name: str) -> Callable[[CredentialStore], Optional[ApiKeyCredential]]:
    """Resolver for an ``{"type": "api", "key": ...}`` auth-file entry."""

    def resolve(store: CredentialStore) -> Optional[ApiKeyCredential]:
        key = store.api_key(name)
        return ApiKeyCredential(key) if key else None

    return resolve


def api_key_from_config(
    name: str, field: str = "key"
) -> Callable[[CredentialStore], Optional[ApiKeyCredential]]:
    """Resolver for a provider config entry holding ``field``."""

    def resolve(store: CredentialStore) -> Optional[ApiKeyCredential]:
        settings = store.provider_settings(name)
        if settings is None:
            return None
        key = getattr(settings, field, None)
        if not key:
            return None
        return ApiKeyCredential(key, group_id=settings.groupId)

    return resolve


def bearer(credential: ApiKeyCredential) -> dict:
    return {"Authorization": f"Bearer {credential.key}"}


def fetch_single(config: ProviderConfig, credential: Any, ctx: QueryContext) -> Any:
    """Run the config's one request, trying ``fallback_url`` if it fails."""
    descriptor = config.build_descriptor(credential, ctx)
    try:
        return ctx.execute(descriptor)
    except QuotaError as e:
        if not config.fallback_url:
            raise
        logger.warning(
            "%s primary endpoint failed (%s), trying %s", config.name, e, config.fallback_url
        )
        return ctx.execute(replace(descriptor, url=config.fallback_url))


def query_provider(
    config: ProviderConfig, store: CredentialStore, ctx: QueryContext
) -> QueryResult:
    """Query one platform. Never raises."""
    credential = config.credential(store)
    if credential is None:
        logger.debug("%s not configured, skipping.", config.name)
        return QueryResult.absent()

    try:
        if config.fetch is not None:
            output = config.fetch(credential, ctx)
        else:
            data = fetch_single(config, credential, ctx)
            output = config.transform(data, credential, ctx.locale)
        return QueryResult.ok(output)
    except QuotaError as e:
        logger.info("%s query failed: %s", config.name, e)
        return QueryResult.failed(str(wrap_error(e, config.name)))
    except Exception as e:
        logger.exception("%s query raised unexpectedly", config.name)
        return QueryResult.failed(str(wrap_error(e, config.name)))


_LEADING_INT = re.compile(r"\s*(-?\d+)")


def header_int(headers: Mapping[str, str], name: str) -> Optional[int]:
    """Leading integer of a rate-limit header (``"30s"`` -> 30), or None."""
    value = headers.get(name)
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None
