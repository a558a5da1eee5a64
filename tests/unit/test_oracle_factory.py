from unittest.mock import MagicMock, patch

import pytest

from docvault.config.settings import Settings
from docvault.oracle.factory import OracleFactory
from docvault.oracle.oracle import AuthenticityOracle


def _make_settings(**overrides: object) -> Settings:
    return Settings(**overrides)


class TestOracleFactory:
    def test_example_provider_needs_no_network(self) -> None:
        oracle = OracleFactory.create(_make_settings(oracle_provider="example"))
        assert isinstance(oracle, AuthenticityOracle)

    @patch("docvault.oracle.factory.OpenAIClientAdapter")
    def test_openai_provider(self, mock_adapter: MagicMock) -> None:
        oracle = OracleFactory.create(
            _make_settings(
                oracle_provider="openai",
                oracle_openai_api_key="sk-test",
                oracle_openai_timeout_seconds=12,
            )
        )
        assert isinstance(oracle, AuthenticityOracle)
        mock_adapter.assert_called_once_with(api_key="sk-test", timeout_seconds=12, base_url=None)

    @patch("docvault.oracle.factory.OpenAIClientAdapter")
    def test_openrouter_uses_default_base_url(self, mock_adapter: MagicMock) -> None:
        OracleFactory.create(
            _make_settings(oracle_provider="OpenRouter", oracle_openrouter_api_key="or-key")
        )
        mock_adapter.assert_called_once_with(
            api_key="or-key", timeout_seconds=30, base_url="https://openrouter.ai/api/v1"
        )

    @patch("docvault.oracle.factory.OpenAIClientAdapter")
    def test_openai_compatible_uses_configured_url(self, mock_adapter: MagicMock) -> None:
        OracleFactory.create(
            _make_settings(
                oracle_provider="openai_compatible",
                oracle_openai_compatible_base_url="http://llm.local/v1",
                oracle_openai_compatible_api_key="local",
                oracle_openai_compatible_model_name="llava",
            )
        )
        assert mock_adapter.call_args.kwargs["base_url"] == "http://llm.local/v1"

    def test_openai_compatible_requires_url(self) -> None:
        with pytest.raises(ValueError, match="base_url is required"):
            OracleFactory.create(_make_settings(oracle_provider="openai_compatible"))

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown oracle provider 'mystery'"):
            OracleFactory.create(_make_settings(oracle_provider="mystery"))
