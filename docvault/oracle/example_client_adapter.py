"""Example oracle client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseOracleClient and register the provider in OracleFactory.
"""

import json
from typing import ClassVar

from docvault.oracle.client_base import BaseOracleClient


class ExampleClientAdapter(BaseOracleClient):
    """Example adapter that always answers with a fixed authentic verdict.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "authentic": True,
        "confidence": 90,
        "issues": [],
        "summary": "No signs of tampering (example provider)",
    }

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, image_url
        return json.dumps(self.DEFAULT_RESPONSE)
