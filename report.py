"""Report assembly: query every provider concurrently and join the results."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Sequence

import config as app_config
from credentials import CredentialStore
from providers import PROVIDERS
from providers.base import ProviderConfig, QueryContext, QueryResult, query_provider

logger = logging.getLogger(__name__)


def query_all(
    providers: Sequence[ProviderConfig], store: CredentialStore, ctx: QueryContext
) -> list[QueryResult]:
    """Run every provider query in parallel. Results keep ``providers`` order."""
    if not providers:
        return []
    with ThreadPoolExecutor(max_workers=len(providers)) as pool:
        return list(pool.map(lambda provider: query_provider(provider, store, ctx), providers))


def render_report(
    providers: Sequence[ProviderConfig], results: Sequence[QueryResult], ctx: QueryContext
) -> str:
    locale = ctx.locale
    blocks: list[str] = []
    errors: list[str] = []

    for provider, result in zip(providers, results):
        if result.is_absent:
            continue
        if result.success:
            blocks.append(f"{locale.t(provider.title_key)}\n\n{result.output}")
        else:
            errors.append(result.error)

    if not blocks and not errors:
        return locale.t("no_accounts")

    output = "\n\n".join(blocks)
    if errors:
        if output:
            output += "\n\n"
        output += locale.t("query_failed") + "\n".join(errors)
    return output


def build_report(
    store: CredentialStore,
    ctx: QueryContext,
    providers: Sequence[ProviderConfig] = PROVIDERS,
    cfg: dict[str, Any] | None = None,
) -> str:
    """Query all enabled providers and return the report text."""
    if cfg is not None:
        providers = [p for p in providers if app_config.is_provider_enabled(cfg, p.id)]

    results = query_all(providers, store, ctx)
    failed = sum(1 for r in results if not r.success and not r.is_absent)
    logger.info(
        "Queried %d providers: %d succeeded, %d failed.",
        len(results),
        sum(1 for r in results if r.success),
        failed,
    )
    return render_report(providers, results, ctx)
