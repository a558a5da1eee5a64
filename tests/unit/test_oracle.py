import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from docvault.oracle.client_base import BaseOracleClient
from docvault.oracle.example_client_adapter import ExampleClientAdapter
from docvault.oracle.exceptions import OracleError, OracleValidationError
from docvault.oracle.models import AuthenticityContext
from docvault.oracle.oracle import AuthenticityOracle
from docvault.oracle.prompt_loader import load_prompt

_CONTEXT = AuthenticityContext(file_name="id-card.jpg", mime_type="image/jpeg", file_size=4096)


def _make_client(raw: str) -> MagicMock:
    client = MagicMock(spec=BaseOracleClient)
    client.create_vision_completion.return_value = raw
    return client


class TestAuthenticityOracle:
    def test_parses_verdict(self) -> None:
        client = _make_client(
            json.dumps({"authentic": False, "confidence": 40, "issues": ["cloned region"], "summary": "Edited"})
        )
        verdict = AuthenticityOracle(client=client, model="m").score_authenticity("aGVsbG8=", _CONTEXT)

        assert verdict.authentic is False
        assert verdict.confidence == 40.0
        assert verdict.issues == ["cloned region"]
        assert verdict.summary == "Edited"

    def test_sends_data_url_and_file_context(self) -> None:
        client = _make_client('{"authentic": true, "confidence": 80}')
        AuthenticityOracle(client=client, model="vision-model").score_authenticity("aGVsbG8=", _CONTEXT)

        kwargs = client.create_vision_completion.call_args.kwargs
        assert kwargs["model"] == "vision-model"
        assert kwargs["image_url"] == "data:image/jpeg;base64,aGVsbG8="
        assert "id-card.jpg" in kwargs["user_prompt"]
        assert "image/jpeg" in kwargs["user_prompt"]

    def test_extracts_json_from_surrounding_text(self) -> None:
        client = _make_client('Here you go:\n```json\n{"authentic": null, "confidence": 5}\n```')
        verdict = AuthenticityOracle(client=client, model="m").score_authenticity("x", _CONTEXT)
        assert verdict.authentic is None

    def test_no_json_raises(self) -> None:
        client = _make_client("I cannot help with that")
        with pytest.raises(OracleError, match="no JSON object"):
            AuthenticityOracle(client=client, model="m").score_authenticity("x", _CONTEXT)

    def test_invalid_verdict_raises_validation_error(self) -> None:
        client = _make_client('{"authentic": "yes", "confidence": 50}')
        with pytest.raises(OracleValidationError):
            AuthenticityOracle(client=client, model="m").score_authenticity("x", _CONTEXT)

    def test_temperature_is_clamped(self) -> None:
        client = _make_client('{"authentic": true, "confidence": 50}')
        AuthenticityOracle(client=client, model="m", temperature=0.9).score_authenticity("x", _CONTEXT)
        assert client.create_vision_completion.call_args.kwargs["temperature"] == 0.2

    def test_example_adapter_round_trip(self) -> None:
        verdict = AuthenticityOracle(client=ExampleClientAdapter(), model="example").score_authenticity(
            "x", _CONTEXT
        )
        assert verdict.authentic is True
        assert verdict.confidence == 90.0


class TestPromptLoader:
    def test_loads_bundled_prompts(self) -> None:
        assert "authentic" in load_prompt("authenticity_system.txt")
        assert "{file_name}" in load_prompt("authenticity_user.txt")

    def test_explicit_path_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.txt"
        path.write_text("custom prompt", encoding="utf-8")
        assert load_prompt("authenticity_system.txt", path) == "custom prompt"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OracleError, match="Failed to load prompt"):
            load_prompt("missing.txt", tmp_path / "missing.txt")
