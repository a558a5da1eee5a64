"""Vision-model authenticity oracle."""

import json
import re
from pathlib import Path

from docvault.logging.logger import Log
from docvault.oracle.base import BaseAuthenticityOracle
from docvault.oracle.client_base import BaseOracleClient
from docvault.oracle.exceptions import OracleError
from docvault.oracle.models import AuthenticityContext, OracleVerdict
from docvault.oracle.prompt_loader import load_prompt
from docvault.oracle.validator import validate_and_build

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class AuthenticityOracle(BaseAuthenticityOracle):
    """Asks a vision model whether a document image shows signs of forgery."""

    def __init__(
        self,
        *,
        client: BaseOracleClient,
        model: str,
        temperature: float = 0.0,
        system_prompt_path: Path | None = None,
        user_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = load_prompt("authenticity_system.txt", system_prompt_path)
        self._user_template = load_prompt("authenticity_user.txt", user_prompt_path)

    def score_authenticity(self, preview: str, context: AuthenticityContext) -> OracleVerdict:
        user_prompt = self._user_template.format(
            mime_type=context.mime_type,
            file_name=context.file_name,
            file_size=context.file_size,
        ).strip()
        raw_response = self._client.create_vision_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=user_prompt,
            image_url=f"data:{context.mime_type};base64,{preview}",
        )
        Log.debug(f"Oracle raw response:\n{raw_response}")

        verdict = validate_and_build(self._parse_json(raw_response))
        Log.info(
            f"Oracle verdict for {context.file_name}: authentic={verdict.authentic} "
            f"confidence={verdict.confidence:g}"
        )
        return verdict

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        match = _JSON_OBJECT.search(raw)
        if match is None:
            raise OracleError("Oracle response contains no JSON object")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise OracleError(f"Invalid JSON response: {exc}") from exc
        if not isinstance(parsed, dict):
            raise OracleError("JSON response must be an object")
        return parsed
