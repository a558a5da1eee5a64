import httpx
import openai

from docvault.oracle.client_base import BaseOracleClient
from docvault.oracle.exceptions import OracleError, OracleUnavailableError

_PAYMENT_REQUIRED = 402


class OpenAIClientAdapter(BaseOracleClient):
    """Vision client built on the OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": user_prompt},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    },
                ],
            )
        except openai.RateLimitError as exc:
            raise OracleUnavailableError("Rate limited, skipped AI analysis") from exc
        except openai.APIStatusError as exc:
            if exc.status_code == _PAYMENT_REQUIRED:
                raise OracleUnavailableError("Credits exhausted, skipped AI analysis") from exc
            raise OracleUnavailableError(f"AI provider API error: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise OracleUnavailableError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise OracleUnavailableError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise OracleError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise OracleError("AI returned empty response")
        return content
