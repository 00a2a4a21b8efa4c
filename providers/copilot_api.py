"""GitHub Copilot provider: premium request quota.

Two routes are supported. A fine-grained personal access token saved in the
Copilot quota token file is used against the public billing API. Without
one, the OpenCode ``github-copilot`` OAuth record is tried against the
internal ``/copilot_internal/user`` endpoint: first with a cached session
token, then with the OAuth token directly, then after exchanging it for a
session token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel

from credentials import AuthRecord, CopilotQuotaConfig, CredentialStore
from errors import AuthenticationError, HttpError, QuotaError
from formatting import create_progress_bar, round_half_up
from i18n import Locale
from providers.base import ProviderConfig, QueryContext

logger = logging.getLogger(__name__)

GITHUB_API_BASE_URL = "https://api.github.com"
COPILOT_USER_URL = f"{GITHUB_API_BASE_URL}/copilot_internal/user"
COPILOT_TOKEN_URL = f"{GITHUB_API_BASE_URL}/copilot_internal/v2/token"

COPILOT_VERSION = "0.35.0"
COPILOT_HEADERS = {
    "User-Agent": f"GitHubCopilotChat/{COPILOT_VERSION}",
    "Editor-Version": "vscode/1.107.0",
    "Editor-Plugin-Version": f"copilot-chat/{COPILOT_VERSION}",
    "Copilot-Integration-Id": "vscode-chat",
}

# Premium requests per month for each plan.
COPILOT_PLAN_LIMITS = {
    "free": 50,
    "pro": 300,
    "pro+": 1500,
    "business": 300,
    "enterprise": 1000,
}

QUOTA_BAR_WIDTH = 20
TOP_MODELS = 5


class QuotaDetail(BaseModel):
    entitlement: float
    overage_count: float
    overage_permitted: bool
    percent_remaining: float
    quota_id: str
    quota_remaining: float
    remaining: float
    unlimited: bool


class QuotaSnapshots(BaseModel):
    chat: Optional[QuotaDetail] = None
    completions: Optional[QuotaDetail] = None
    premium_interactions: QuotaDetail


class CopilotUsageResponse(BaseModel):
    access_type_sku: str
    analytics_tracking_id: str
    assigned_date: str
    can_signup_for_limited: bool
    chat_enabled: bool
    copilot_plan: str
    organization_login_list: list[Any]
    organization_list: list[Any]
    quota_reset_date: str
    quota_snapshots: QuotaSnapshots


class CopilotTokenEndpoints(BaseModel):
    api: str


class CopilotTokenResponse(BaseModel):
    token: str
    expires_at: float
    refresh_in: float
    endpoints: CopilotTokenEndpoints


class BillingUsageItem(BaseModel):
    product: str
    sku: str
    model: Optional[str] = None
    unitType: str
    grossQuantity: float
    netQuantity: float
    limit: Optional[float] = None


class BillingTimePeriod(BaseModel):
    year: int
    month: Optional[int] = None


class BillingUsageResponse(BaseModel):
    timePeriod: BillingTimePeriod
    user: str
    usageItems: list[BillingUsageItem]


@dataclass(frozen=True)
class CopilotCredential:
    quota_config: Optional[CopilotQuotaConfig] = None
    oauth: Optional[AuthRecord] = None


def _n(value: float) -> str:
    return f"{value:g}"


def format_quota_line(name: str, quota: QuotaDetail | None, locale: Locale) -> str:
    if quota is None:
        return ""
    if quota.unlimited:
        return f"{name:<14} {locale.t('unlimited')}"
    total = quota.entitlement
    used = total - quota.remaining
    percent_remaining = round_half_up(quota.percent_remaining)
    bar = create_progress_bar(percent_remaining, QUOTA_BAR_WIDTH)
    return f"{name:<14} {bar} {percent_remaining}% ({_n(used)}/{_n(total)})"


def get_reset_countdown(reset_date: str, locale: Locale, now: datetime | None = None) -> str:
    try:
        reset = datetime.fromisoformat(reset_date.replace("Z", "+00:00"))
    except ValueError:
        return reset_date
    if reset.tzinfo is None:
        reset = reset.replace(tzinfo=timezone.utc)
    diff_seconds = (reset - (now or datetime.now(timezone.utc))).total_seconds()
    if diff_seconds <= 0:
        return locale.t("resets_soon")
    days = int(diff_seconds // 86400)
    hours = int((diff_seconds % 86400) // 3600)
    if days > 0:
        return f"{days}d {hours}h"
    return f"{hours}h"


def format_copilot_usage(data: CopilotUsageResponse, locale: Locale) -> str:
    lines = [f"{locale.t('account')}        GitHub Copilot ({data.copilot_plan})", ""]
    snapshots = data.quota_snapshots

    premium = snapshots.premium_interactions
    lines.append(format_quota_line(locale.t("premium_requests"), premium, locale))
    if premium.overage_count > 0:
        lines.append(
            f"{locale.t('overage')}: {_n(premium.overage_count)} {locale.t('overage_requests')}"
        )

    for key, quota in (("chat_quota", snapshots.chat), ("completions_quota", snapshots.completions)):
        if quota is not None and not quota.unlimited:
            lines.append(format_quota_line(locale.t(key), quota, locale))

    lines.append("")
    countdown = get_reset_countdown(data.quota_reset_date, locale)
    lines.append(f"{locale.t('quota_resets')}: {countdown} ({data.quota_reset_date})")
    return "\n".join(lines)


def format_public_billing_usage(data: BillingUsageResponse, tier: str, locale: Locale) -> str:
    """Sum gross premium-request usage across models against the plan's monthly limit."""
    lines = [f"{locale.t('account')}        GitHub Copilot (@{data.user})", ""]

    premium_items = [
        item
        for item in data.usageItems
        if item.sku == "Copilot Premium Request" or "Premium" in item.sku
    ]
    total_used = sum(item.grossQuantity for item in premium_items)
    limit = COPILOT_PLAN_LIMITS[tier]
    remaining = max(0, limit - total_used)
    percent_remaining = round_half_up(remaining / limit * 100)
    bar = create_progress_bar(percent_remaining, QUOTA_BAR_WIDTH)
    lines.append(
        f"{locale.t('premium_requests'):<14} {bar} {percent_remaining}% ({_n(total_used)}/{limit})"
    )

    model_items = [item for item in data.usageItems if item.model and item.grossQuantity > 0]
    if model_items:
        lines.append("")
        lines.append(locale.t("model_breakdown"))
        model_items.sort(key=lambda item: item.grossQuantity, reverse=True)
        for item in model_items[:TOP_MODELS]:
            lines.append(f"  {item.model}: {_n(item.grossQuantity)} {item.unitType}")

    lines.append("")
    period = data.timePeriod
    period_str = f"{period.year}-{period.month:02d}" if period.month else str(period.year)
    lines.append(f"{locale.t('billing_period')}: {period_str}")
    return "\n".join(lines)


def _now_ms() -> float:
    return datetime.now(timezone.utc).timestamp() * 1000


def _unavailable(locale: Locale) -> str:
    return f"{locale.t('copilot_quota_unavailable')}\n\n{locale.t('copilot_quota_workaround')}"


def fetch_public_billing_usage(config: CopilotQuotaConfig, ctx: QueryContext) -> BillingUsageResponse:
    url = f"{GITHUB_API_BASE_URL}/users/{config.username}/settings/billing/premium_request/usage"
    return ctx.execute(
        ctx.descriptor(
            url,
            CONFIG.name,
            shape=BillingUsageResponse,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
    )


def _user_request(authorization: str, ctx: QueryContext):
    return ctx.descriptor(
        COPILOT_USER_URL,
        CONFIG.name,
        shape=CopilotUsageResponse,
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": authorization,
            **COPILOT_HEADERS,
        },
    )


def _try_user(authorization: str, ctx: QueryContext) -> CopilotUsageResponse | None:
    """Usage via ``authorization``, or None if GitHub answered with an error status."""
    try:
        return ctx.execute(_user_request(authorization, ctx))
    except HttpError as e:
        if e.status is None:
            raise
        logger.debug("Copilot user endpoint rejected credential: %s", e)
        return None


def exchange_for_copilot_token(oauth_token: str, ctx: QueryContext) -> str | None:
    try:
        token = ctx.execute(
            ctx.descriptor(
                COPILOT_TOKEN_URL,
                CONFIG.name,
                shape=CopilotTokenResponse,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {oauth_token}",
                    **COPILOT_HEADERS,
                },
            )
        )
    except QuotaError as e:
        logger.debug("Copilot token exchange failed: %s", e)
        return None
    return token.token


def fetch_copilot_usage(record: AuthRecord, ctx: QueryContext) -> CopilotUsageResponse:
    # With the newer auth flow ``access`` and ``refresh`` both hold the OAuth token.
    oauth_token = record.refresh or record.access
    if not oauth_token:
        raise AuthenticationError("No OAuth token found in auth data")

    cached = record.access
    expires = record.expires or 0
    if cached and cached != oauth_token and expires > _now_ms():
        usage = _try_user(f"Bearer {cached}", ctx)
        if usage is not None:
            return usage

    usage = _try_user(f"token {oauth_token}", ctx)
    if usage is not None:
        return usage

    session_token = exchange_for_copilot_token(oauth_token, ctx)
    if session_token is None:
        raise AuthenticationError(_unavailable(ctx.locale))
    return ctx.execute(_user_request(f"Bearer {session_token}", ctx))


def fetch_copilot(credential: CopilotCredential, ctx: QueryContext) -> str:
    if credential.quota_config is not None:
        config = credential.quota_config
        return format_public_billing_usage(
            fetch_public_billing_usage(config, ctx), config.tier, ctx.locale
        )
    if credential.oauth is None or not credential.oauth.refresh:
        raise AuthenticationError(_unavailable(ctx.locale))
    return format_copilot_usage(fetch_copilot_usage(credential.oauth, ctx), ctx.locale)


def _resolve(store: CredentialStore) -> CopilotCredential | None:
    oauth = store.oauth("github-copilot")
    if store.copilot_quota is None and oauth is None:
        return None
    return CopilotCredential(quota_config=store.copilot_quota, oauth=oauth)


CONFIG = ProviderConfig(
    id="github-copilot",
    name="Copilot",
    title_key="copilot_title",
    credential=_resolve,
    fetch=fetch_copilot,
)
