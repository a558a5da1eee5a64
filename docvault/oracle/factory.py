from typing import ClassVar

from docvault.config.settings import Settings
from docvault.oracle.base import BaseAuthenticityOracle
from docvault.oracle.example_client_adapter import ExampleClientAdapter
from docvault.oracle.openai_client_adapter import OpenAIClientAdapter
from docvault.oracle.oracle import AuthenticityOracle


class OracleFactory:
    """Creates the configured authenticity oracle."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseAuthenticityOracle:
        """Create a configured oracle from application settings."""
        provider = settings.oracle_provider.lower()
        if provider == "example":
            return AuthenticityOracle(client=ExampleClientAdapter(), model="example")
        client = OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=cls._resolve_timeout_seconds(provider, settings),
            base_url=cls._resolve_base_url(provider, settings),
        )
        return AuthenticityOracle(client=client, model=cls._resolve_model_name(provider, settings))

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.oracle_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "oracle_openai_compatible_base_url is required for "
                    "oracle_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = ["example", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]
        raise ValueError(f"Unknown oracle provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.oracle_openai_api_key,
            "openai_compatible": settings.oracle_openai_compatible_api_key,
            "openrouter": settings.oracle_openrouter_api_key,
        }
        return key_map.get(provider, "")

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.oracle_openai_model_name,
            "openai_compatible": settings.oracle_openai_compatible_model_name,
            "openrouter": settings.oracle_openrouter_model_name,
        }
        return key_map.get(provider, "")

    @classmethod
    def _resolve_timeout_seconds(cls, provider: str, settings: Settings) -> int:
        if provider == "openai":
            return settings.oracle_openai_timeout_seconds
        return settings.oracle_timeout_seconds
