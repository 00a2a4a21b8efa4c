"""Tests for keychain module."""

from unittest.mock import patch

import keyring

import keychain


class TestGetApiKey:
    @patch("keychain.keyring.get_password")
    def test_returns_key(self, mock_get):
        mock_get.return_value = "sk-test-key-123"
        result = keychain.get_api_key("anthropic")
        assert result == "sk-test-key-123"
        mock_get.assert_called_once_with("ai-quota-status", "anthropic-api-key")

    @patch("keychain.keyring.get_password")
    def test_returns_none_when_not_found(self, mock_get):
        mock_get.return_value = None
        assert keychain.get_api_key("groq") is None

    @patch("keychain.keyring.get_password")
    def test_returns_none_on_keyring_error(self, mock_get):
        mock_get.side_effect = keyring.errors.KeyringLocked("Keychain locked")
        assert keychain.get_api_key("anthropic") is None

    @patch("keychain.keyring.get_password")
    def test_returns_none_on_backend_failure(self, mock_get):
        mock_get.side_effect = RuntimeError("no backend")
        assert keychain.get_api_key("anthropic") is None

    @patch("keychain.keyring.get_password")
    def test_mapped_account_names(self, mock_get):
        mock_get.return_value = "key"
        keychain.get_api_key("zhipuai-coding-plan")
        mock_get.assert_called_once_with("ai-quota-status", "zhipu-api-key")

    def test_default_account_name(self):
        assert keychain.account_name("kimi-code") == "kimi-code-api-key"
        assert keychain.account_name("zai-coding-plan") == "zai-api-key"
