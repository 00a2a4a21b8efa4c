"""Tests for provider modules."""

import base64
import json
import time
from typing import Optional
from unittest.mock import MagicMock, patch

import pytest
from pydantic import BaseModel

from credentials import AuthRecord, CredentialStore, ProviderSettings
from formatting import create_progress_bar
from i18n import Locale
from providers import PROVIDERS
from providers.base import (
    ApiKeyCredential,
    ProviderConfig,
    QueryContext,
    QueryStatus,
    api_key_from_config,
    header_int,
    query_provider,
)
from providers import (
    abacus_api,
    anthropic_api,
    chutes_api,
    gemini_api,
    groq_api,
    kimi_api,
    minimax_api,
    nanogpt_api,
    openai_api,
    zhipu_api,
)


def _ctx(lang="en"):
    return QueryContext(locale=Locale(lang), timeout=5.0, retries=0, sleep=MagicMock())


def _api_store(name, key):
    return CredentialStore(auth={name: AuthRecord(type="api", key=key)})


def _config_store(name, **settings):
    return CredentialStore(provider_config={name: ProviderSettings(**settings)})


def _sent_headers(mock_request, index=-1):
    return mock_request.call_args_list[index].kwargs["headers"]


def _jwt(payload):
    body = base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
    return f"eyJhbGciOiJub25lIn0.{body.rstrip('=')}.signature"


class TestRegistry:
    def test_ids_are_unique(self):
        ids = [p.id for p in PROVIDERS]
        assert len(ids) == len(set(ids))

    def test_report_order(self):
        assert [p.id for p in PROVIDERS][:5] == [
            "openai",
            "zhipuai-coding-plan",
            "zai-coding-plan",
            "google",
            "github-copilot",
        ]
        assert PROVIDERS[-1].id == "chutes"

    def test_every_provider_has_a_request_path(self):
        for provider in PROVIDERS:
            assert provider.fetch is not None or (provider.url and provider.transform)


class TestHeaderInt:
    def test_leading_integer(self):
        assert header_int({"x": "30s"}, "x") == 30
        assert header_int({"x": " 42"}, "x") == 42

    def test_missing_or_garbage(self):
        assert header_int({}, "x") is None
        assert header_int({"x": ""}, "x") is None
        assert header_int({"x": "soon"}, "x") is None


class TestQueryProvider:
    def test_absent_without_credentials(self):
        fetch = MagicMock()
        config = ProviderConfig(
            id="demo", name="Demo", title_key="groq_title", credential=lambda store: None, fetch=fetch
        )
        result = query_provider(config, CredentialStore(), _ctx())
        assert result.status is QueryStatus.ABSENT
        fetch.assert_not_called()

    def test_unexpected_exception_becomes_failure(self):
        def transform(data, credential, locale):
            raise KeyError("boom")

        config = ProviderConfig(
            id="demo",
            name="Demo",
            title_key="groq_title",
            credential=lambda store: "cred",
            fetch=lambda credential, ctx: transform(None, credential, ctx.locale),
        )
        result = query_provider(config, CredentialStore(), _ctx())
        assert result.status is QueryStatus.FAILURE
        assert result.error.startswith("[Demo] ")

    @patch("http_client.requests.request")
    def test_single_request_config(self, mock_request, make_response):
        class Balance(BaseModel):
            amount: float

        mock_request.return_value = make_response(200, json_body={"amount": 3.5})
        config = ProviderConfig(
            id="demo",
            name="Demo",
            title_key="groq_title",
            credential=api_key_from_config("demo"),
            base_url="https://demo.example.com",
            endpoint="/balance",
            auth_header=lambda cred: {"Authorization": cred.key},
            schema=Balance,
            transform=lambda data, cred, locale: f"{data.amount} for {cred.key}",
        )
        result = query_provider(config, _config_store("demo", key="k1"), _ctx())
        assert result.success
        assert result.output == "3.5 for k1"
        assert mock_request.call_args.args == ("GET", "https://demo.example.com/balance")
        assert mock_request.call_args.kwargs["timeout"] == 5.0

    @patch("http_client.requests.request")
    def test_config_timeout_overrides_context(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"ok": True})
        config = ProviderConfig(
            id="demo",
            name="Demo",
            title_key="groq_title",
            credential=api_key_from_config("demo"),
            base_url="https://demo.example.com",
            endpoint="/status",
            transform=lambda data, cred, locale: "fine",
            timeout=42.0,
        )
        assert query_provider(config, _config_store("demo", key="k1"), _ctx()).success
        assert mock_request.call_args.kwargs["timeout"] == 42.0


class TestOpenAI:
    TOKEN_PAYLOAD = {
        "https://api.openai.com/profile": {"email": "dev@example.com"},
        "https://api.openai.com/auth": {"chatgpt_account_id": "acc-123"},
    }

    def _store(self, **record):
        record.setdefault("type", "oauth")
        record.setdefault("access", _jwt(self.TOKEN_PAYLOAD))
        return CredentialStore(auth={"openai": AuthRecord(**record)})

    def test_jwt_claims(self):
        token = _jwt(self.TOKEN_PAYLOAD)
        assert openai_api.get_email_from_jwt(token) == "dev@example.com"
        assert openai_api.get_account_id_from_jwt(token) == "acc-123"

    def test_malformed_jwt(self):
        assert openai_api.parse_jwt("not-a-jwt") is None
        assert openai_api.parse_jwt("a.!!!.c") is None
        assert openai_api.get_email_from_jwt("a.b") is None

    def test_window_names(self):
        locale = Locale("en")
        assert openai_api.format_window_name(18000, locale) == "5-hour limit"
        assert openai_api.format_window_name(604800, locale) == "7-day limit"

    def test_absent_without_oauth(self):
        assert query_provider(openai_api.CONFIG, CredentialStore(), _ctx()).is_absent

    @patch("http_client.requests.request")
    def test_expired_token(self, mock_request):
        store = self._store(expires=(time.time() - 60) * 1000)
        result = query_provider(openai_api.CONFIG, store, _ctx())
        assert result.status is QueryStatus.FAILURE
        assert result.error == "[OpenAI] " + Locale("en").t("token_expired")
        mock_request.assert_not_called()

    @patch("http_client.requests.request")
    def test_usage_report(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200,
            json_body={
                "plan_type": "plus",
                "rate_limit": {
                    "limit_reached": False,
                    "primary_window": {
                        "used_percent": 25,
                        "limit_window_seconds": 18000,
                        "reset_after_seconds": 3600,
                    },
                    "secondary_window": {
                        "used_percent": 90.4,
                        "limit_window_seconds": 604800,
                        "reset_after_seconds": 90000,
                    },
                },
            },
        )
        store = self._store(expires=(time.time() + 3600) * 1000)

        result = query_provider(openai_api.CONFIG, store, _ctx())

        assert result.success
        lines = result.output.split("\n")
        assert lines[0] == "Account:        dev@example.com (plus)"
        assert "5-hour limit" in lines
        assert f"{create_progress_bar(75)} 75% remaining" in lines
        assert "Resets in: 1h" in lines
        assert "7-day limit" in lines
        assert f"{create_progress_bar(10)} 10% remaining" in lines
        assert "Resets in: 1d 1h" in lines
        assert "Rate limit reached" not in result.output

        headers = _sent_headers(mock_request)
        assert headers["ChatGPT-Account-Id"] == "acc-123"
        assert headers["Authorization"].startswith("Bearer ")
        assert mock_request.call_args.args[1] == openai_api.OPENAI_USAGE_URL

    @patch("http_client.requests.request")
    def test_limit_reached_and_no_secondary(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200,
            json_body={
                "plan_type": "pro",
                "rate_limit": {
                    "limit_reached": True,
                    "primary_window": {
                        "used_percent": 100,
                        "limit_window_seconds": 18000,
                        "reset_after_seconds": 0,
                    },
                },
            },
        )
        result = query_provider(openai_api.CONFIG, self._store(), _ctx())
        assert result.output.endswith("⚠️ Rate limit reached!")
        assert "day limit" not in result.output

    @patch("http_client.requests.request")
    def test_unknown_email(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"plan_type": "team"})
        store = CredentialStore(auth={"openai": AuthRecord(type="oauth", access="opaque")})
        result = query_provider(openai_api.CONFIG, store, _ctx())
        assert result.output.startswith("Account:        unknown (team)")


class TestZhipu:
    KEY = "abcd1234567890wxyz"

    def _body(self, **overrides):
        body = {
            "code": 200,
            "msg": "ok",
            "success": True,
            "data": {
                "limits": [
                    {
                        "type": "TOKENS_LIMIT",
                        "usage": 40_000_000,
                        "currentValue": 10_000_000,
                        "percentage": 25,
                        "nextResetTime": (time.time() + 7230) * 1000,
                    },
                    {"type": "TIME_LIMIT", "usage": 100, "currentValue": 20, "percentage": 20},
                ]
            },
        }
        body.update(overrides)
        return body

    @patch("http_client.requests.request")
    def test_quota_report(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body=self._body())

        result = query_provider(
            zhipu_api.ZHIPU_CONFIG, _api_store("zhipuai-coding-plan", self.KEY), _ctx()
        )

        assert result.success
        lines = result.output.split("\n")
        assert lines[0] == "Account:        abcd****wxyz (Coding Plan)"
        assert "5-hour token limit" in lines
        assert f"{create_progress_bar(75)} 75% remaining" in lines
        assert "Used: 10.0M / 40.0M" in lines
        assert "Resets in: 2h" in lines
        assert "MCP monthly quota" in lines
        assert "Used: 20 / 100" in lines
        assert "Rate limit reached" not in result.output

        assert mock_request.call_args.args[1] == "https://bigmodel.cn/api/monitor/usage/quota/limit"
        assert _sent_headers(mock_request)["Authorization"] == self.KEY

    @patch("http_client.requests.request")
    def test_zai_uses_its_own_host(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body=self._body())
        result = query_provider(zhipu_api.ZAI_CONFIG, _api_store("zai-coding-plan", self.KEY), _ctx())
        assert result.output.split("\n")[0] == "Account:        abcd****wxyz (Z.ai)"
        assert mock_request.call_args.args[1] == "https://api.z.ai/api/monitor/usage/quota/limit"

    @patch("http_client.requests.request")
    def test_high_usage_warning(self, mock_request, make_response):
        body = self._body()
        body["data"]["limits"][1]["percentage"] = 85
        mock_request.return_value = make_response(200, json_body=body)
        result = query_provider(
            zhipu_api.ZHIPU_CONFIG, _api_store("zhipuai-coding-plan", self.KEY), _ctx()
        )
        assert result.output.endswith("⚠️ Rate limit reached!")

    @patch("http_client.requests.request")
    def test_business_error(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body=self._body(code=1001, msg="bad key", success=False)
        )
        result = query_provider(
            zhipu_api.ZHIPU_CONFIG, _api_store("zhipuai-coding-plan", self.KEY), _ctx()
        )
        assert result.error == "[Zhipu] Zhipu API request failed (1001): bad key"

    @patch("http_client.requests.request")
    def test_business_error_without_data(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body={"code": 1001, "msg": "Authorization token invalid", "success": False}
        )
        result = query_provider(zhipu_api.ZAI_CONFIG, _api_store("zai-coding-plan", self.KEY), _ctx())
        assert result.error == "[Z.ai] Z.ai API request failed (1001): Authorization token invalid"

    @patch("http_client.requests.request")
    def test_success_without_data(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"code": 200, "success": True})
        result = query_provider(
            zhipu_api.ZHIPU_CONFIG, _api_store("zhipuai-coding-plan", self.KEY), _ctx()
        )
        assert result.error == "[Zhipu] Response validation failed: data: Field required"

    @patch("http_client.requests.request")
    def test_unknown_limit_type_rejected(self, mock_request, make_response):
        body = self._body()
        body["data"]["limits"][0]["type"] = "OTHER"
        mock_request.return_value = make_response(200, json_body=body)
        result = query_provider(
            zhipu_api.ZHIPU_CONFIG, _api_store("zhipuai-coding-plan", self.KEY), _ctx()
        )
        assert result.error.startswith("[Zhipu] Response validation failed")

    @patch("http_client.requests.request")
    def test_empty_limits(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body=self._body(data={"limits": []}))
        result = query_provider(
            zhipu_api.ZHIPU_CONFIG, _api_store("zhipuai-coding-plan", self.KEY), _ctx()
        )
        assert result.output.endswith("No quota data available")


class TestAnthropic:
    KEY = "sk-ant-api03-abcdefgh"

    @patch("http_client.requests.request")
    def test_rate_limit_headers(self, mock_request, make_response):
        reset = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time() + 3 * 3600 + 90))
        mock_request.return_value = make_response(
            200,
            json_body={"data": []},
            headers={
                "anthropic-ratelimit-requests-remaining": "950",
                "anthropic-ratelimit-tokens-remaining": "45000",
                "anthropic-ratelimit-tokens-reset": reset,
            },
        )

        result = query_provider(anthropic_api.CONFIG, _api_store("anthropic", self.KEY), _ctx())

        lines = result.output.split("\n")
        assert lines[0] == "Account: sk-a****efgh (Anthropic Claude)"
        assert "Requests remaining: 950" in lines
        assert "Tokens remaining: 45,000" in lines
        assert "Resets in: 3h 1m" in lines
        headers = _sent_headers(mock_request)
        assert headers["x-api-key"] == self.KEY
        assert headers["anthropic-version"] == "2023-06-01"

    @patch("http_client.requests.request")
    def test_no_headers(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"data": []})
        result = query_provider(anthropic_api.CONFIG, _api_store("anthropic", self.KEY), _ctx())
        assert result.success
        assert result.output.endswith("No quota data available")

    @patch("http_client.requests.request")
    def test_invalid_key(self, mock_request, make_response):
        mock_request.return_value = make_response(401, text="unauthorized")
        result = query_provider(anthropic_api.CONFIG, _api_store("anthropic", self.KEY), _ctx())
        assert result.error == "[Anthropic] Invalid Anthropic API key. Please check your key."

    def test_numeric_reset_header(self):
        assert anthropic_api._parse_reset("1700000000") == 1700000000
        assert anthropic_api._parse_reset("garbage") is None


class TestGroq:
    KEY = "gsk_1234567890abcdef"

    def test_parse_reset_duration(self):
        assert groq_api.parse_reset_duration("2m59.56s") == 179
        assert groq_api.parse_reset_duration("7.66s") == 7
        assert groq_api.parse_reset_duration("1h2m3s") == 3723
        assert groq_api.parse_reset_duration("") is None
        assert groq_api.parse_reset_duration("later") is None

    @patch("http_client.requests.request")
    def test_rate_limit_headers(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200,
            json_body={"data": []},
            headers={
                "x-ratelimit-limit-requests": "14400",
                "x-ratelimit-remaining-requests": "14370",
                "x-ratelimit-reset-requests": "2m59.56s",
                "x-ratelimit-limit-tokens": "6000",
                "x-ratelimit-remaining-tokens": "5997",
                "x-ratelimit-reset-tokens": "7.66s",
            },
        )

        result = query_provider(groq_api.CONFIG, _api_store("groq", self.KEY), _ctx())

        lines = result.output.split("\n")
        assert lines[0] == "Account: gsk_****cdef (Groq)"
        assert "Requests remaining: 14,370 of 14,400" in lines
        assert "Resets in: 2m" in lines
        assert "Tokens remaining: 5,997 of 6,000" in lines
        assert _sent_headers(mock_request)["Authorization"] == f"Bearer {self.KEY}"
        assert mock_request.call_args.args[1] == "https://api.groq.com/openai/v1/models"

    @patch("http_client.requests.request")
    def test_chinese_report(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200,
            json_body={"data": []},
            headers={"x-ratelimit-limit-requests": "10", "x-ratelimit-remaining-requests": "4"},
        )
        result = query_provider(groq_api.CONFIG, _api_store("groq", self.KEY), _ctx("zh"))
        assert "剩余请求数: 4 / 10" in result.output.split("\n")


class TestGemini:
    KEY = "AIzaSyExample1234"

    def test_format_reset_time(self):
        locale = Locale("en")
        assert gemini_api.format_reset_time(600, locale) == "10m"
        assert gemini_api.format_reset_time(7300, locale) == "2h"
        assert gemini_api.format_reset_time(3 * 86400 + 5, locale) == "3d"

    @patch("http_client.requests.request")
    def test_quota_headers(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200,
            json_body={"models": []},
            headers={
                "x-ratelimit-limit": "60",
                "x-ratelimit-remaining": "50",
                "x-ratelimit-reset": str(int(time.time()) + 1800),
            },
        )
        result = query_provider(gemini_api.CONFIG, _api_store("gemini", self.KEY), _ctx())
        lines = result.output.split("\n")
        assert "Quota remaining: 50 of 60" in lines
        assert any(line.startswith("Resets in: ") and line.endswith("m") for line in lines)
        assert _sent_headers(mock_request)["x-goog-api-key"] == self.KEY

    @patch("http_client.requests.request")
    def test_no_headers(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"models": []})
        result = query_provider(gemini_api.CONFIG, _api_store("gemini", self.KEY), _ctx())
        assert result.output.endswith("No quota data available")


class TestKimi:
    KEY = "sk-kimi-1234567890"

    @patch("http_client.requests.request")
    def test_balance_and_quota(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200,
            json_body={
                "code": 200,
                "data": {"balance": 12.5, "currency": "CNY", "totalQuota": 1000, "usedQuota": 900},
            },
        )
        result = query_provider(kimi_api.KIMI_CONFIG, _config_store("kimi", key=self.KEY), _ctx())
        lines = result.output.split("\n")
        assert lines[0] == "Account:        sk-k****7890 (Moonshot)"
        assert "Balance: 12.50 CNY" in lines
        assert f"{create_progress_bar(10)} 10% remaining" in lines
        assert "Used: 900 / 1,000" in lines
        assert lines[-1] == "⚠️ Rate limit reached!"
        assert mock_request.call_args.args[1] == "https://api.moonshot.cn/v1/users/me/balance"

    @patch("http_client.requests.request")
    def test_business_error(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"code": 401, "msg": "unauthorized"})
        result = query_provider(kimi_api.KIMI_CONFIG, _config_store("kimi", key=self.KEY), _ctx())
        assert result.error == "[Kimi] Kimi API request failed (401): unauthorized"

    @patch("http_client.requests.request")
    def test_kimi_code(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"code": 200, "data": {"balance": 3}})
        result = query_provider(
            kimi_api.KIMI_CODE_CONFIG, _config_store("kimi-code", key=self.KEY), _ctx()
        )
        assert "(Kimi Code)" in result.output
        assert "Balance: 3.00 CNY" in result.output
        assert mock_request.call_args.args[1] == "https://api.kimi.com/coding/v1/users/me/balance"

    def test_absent_without_config(self):
        assert query_provider(kimi_api.KIMI_CONFIG, CredentialStore(), _ctx()).is_absent


class TestMinimax:
    KEY = "mm-1234567890abcd"

    @patch("http_client.requests.request")
    def test_falls_back_to_mainland_endpoint(self, mock_request, make_response):
        mock_request.side_effect = [
            make_response(500, text="down"),
            make_response(
                200,
                json_body={"data": []},
                headers={"x-ratelimit-limit": "100", "x-ratelimit-remaining": "75"},
            ),
        ]
        store = _config_store("minimax", key=self.KEY, groupId="g-1")

        result = query_provider(minimax_api.CONFIG, store, _ctx())

        assert result.success
        assert result.output.split("\n")[0] == "Account: mm-1****abcd (MiniMax - Group)"
        assert "Requests remaining: 75 of 100" in result.output
        urls = [c.args[1] for c in mock_request.call_args_list]
        assert urls == ["https://api.minimax.io/v1/models", minimax_api.MINIMAX_MODELS_URL_FALLBACK]
        assert _sent_headers(mock_request)["X-Group-Id"] == "g-1"

    @patch("http_client.requests.request")
    def test_invalid_key_on_both_endpoints(self, mock_request, make_response):
        mock_request.return_value = make_response(401, text="no")
        result = query_provider(minimax_api.CONFIG, _config_store("minimax", key=self.KEY), _ctx())
        assert result.error == "[MiniMax] Invalid MiniMax API key. Please check your key."
        assert mock_request.call_count == 2

    @patch("http_client.requests.request")
    def test_without_group(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"data": []})
        result = query_provider(minimax_api.CONFIG, _config_store("minimax", key=self.KEY), _ctx())
        assert result.output.split("\n")[0] == "Account: mm-1****abcd (MiniMax)"
        assert "X-Group-Id" not in _sent_headers(mock_request)


class TestExperimentalProviders:
    @patch("http_client.requests.request")
    def test_abacus_credits(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body={"credits": 100, "creditsUsed": 40, "creditsRemaining": 60, "tier": "x"}
        )
        result = query_provider(abacus_api.CONFIG, _config_store("abacus", key="abacus-key-123"), _ctx())
        lines = result.output.split("\n")
        assert Locale("en").t("experimental") in lines
        assert "Credits:" in lines
        assert "  Used: 40" in lines
        assert "  Remaining: 60" in lines
        assert "  Total: 100" in lines
        assert mock_request.call_args.args[1] == "https://abacus.ai/api/v0/getUsage"
        assert mock_request.call_args.kwargs["timeout"] == 30.0

    @patch("http_client.requests.request")
    def test_abacus_unrecognized_payload(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body={"account": {"email": "me@example.com"}}
        )
        result = query_provider(abacus_api.CONFIG, _config_store("abacus", key="abacus-key-123"), _ctx())
        assert "No quota data available" in result.output
        assert "  Email: me@example.com" in result.output.split("\n")

    def test_abacus_usage_percentage(self):
        data = abacus_api.AbacusUsageResponse(usage=25, limit=100)
        output = abacus_api.format_abacus_usage(data, "abacus-key-123", Locale("en"))
        assert "  Remaining: 75 (75.0%)" in output.split("\n")

    @patch("http_client.requests.request")
    def test_nanogpt_account(self, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body={"balance": 5.5, "rpdLimit": 1000, "usage": {"today": 12}}
        )
        result = query_provider(nanogpt_api.CONFIG, _config_store("nano-gpt", key="nano-key-12345"), _ctx())
        lines = result.output.split("\n")
        assert "Balance: USD 5.50" in lines
        assert "Daily request limit: 1,000" in lines
        assert "Today's usage: 12" in lines
        assert mock_request.call_args.kwargs["timeout"] == 30.0
        assert "No quota data available" not in lines

    @patch("http_client.requests.request")
    def test_nanogpt_empty(self, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={})
        result = query_provider(nanogpt_api.CONFIG, _config_store("nano-gpt", key="nano-key-12345"), _ctx())
        assert result.output.endswith("No quota data available")


class TestChutes:
    TOKEN = "cpk_1234567890abcd"

    def _responder(self, make_response, usage_status=200):
        def respond(method, url, **kwargs):
            if url == chutes_api.CHUTES_QUOTA_USAGE_URL:
                if usage_status != 200:
                    return make_response(usage_status, text="denied")
                return make_response(
                    200,
                    json_body={
                        "currentPeriodUsage": [
                            {
                                "quotaType": "daily",
                                "name": "Daily requests",
                                "used": 50,
                                "limit": 200,
                                "percentage": 25,
                            }
                        ],
                        "userId": "u1",
                    },
                )
            return make_response(
                200,
                json_body={"quotas": [{"quotaType": "daily", "name": "Daily requests", "limit": 200}], "userId": "u1"},
            )

        return respond

    @patch("http_client.requests.request")
    def test_fetches_both_endpoints(self, mock_request, make_response):
        mock_request.side_effect = self._responder(make_response)

        result = query_provider(chutes_api.CONFIG, _config_store("chutes", token=self.TOKEN), _ctx())

        lines = result.output.split("\n")
        assert lines[0] == "Account: cpk_****abcd (Chutes AI)"
        assert "Daily requests" in lines
        assert f"{create_progress_bar(75)} 75% remaining" in lines
        assert "Used: 50 / 200" in lines
        urls = sorted(c.args[1] for c in mock_request.call_args_list)
        assert urls == sorted([chutes_api.CHUTES_QUOTA_USAGE_URL, chutes_api.CHUTES_QUOTA_LIMITS_URL])

    @patch("http_client.requests.request")
    def test_invalid_token(self, mock_request, make_response):
        mock_request.side_effect = self._responder(make_response, usage_status=401)
        result = query_provider(chutes_api.CONFIG, _config_store("chutes", token=self.TOKEN), _ctx())
        assert result.error == "[Chutes] Invalid Chutes token. Please check your token."

    def test_key_alone_is_not_a_token(self):
        store = _config_store("chutes", key=self.TOKEN)
        assert query_provider(chutes_api.CONFIG, store, _ctx()).is_absent


@pytest.mark.parametrize("provider", PROVIDERS, ids=lambda p: p.id)
def test_nothing_configured_is_absent(provider):
    result = query_provider(provider, CredentialStore(), _ctx())
    assert result.status is QueryStatus.ABSENT


def test_optional_shapes_are_hashable():
    # Shapes are cached per type; Optional[...] must be usable as a key.
    assert hash(Optional[anthropic_api.AnthropicRateLimits])
    assert ApiKeyCredential("k").group_id is None
