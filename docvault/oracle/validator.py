"""Validates the oracle's raw JSON opinion and builds an OracleVerdict."""

from typing import Any

from docvault.oracle.exceptions import OracleValidationError
from docvault.oracle.models import OracleVerdict

_MAX_ISSUES = 50


def validate_and_build(data: dict[str, Any]) -> OracleVerdict:
    """Validate a parsed opinion.

    Raises:
        OracleValidationError: on any validation failure.
    """
    return OracleVerdict(
        authentic=_build_authentic(data.get("authentic")),
        confidence=_build_confidence(data.get("confidence")),
        issues=_build_issues(data.get("issues")),
        summary=_build_summary(data.get("summary")),
    )


def _build_authentic(raw: Any) -> bool | None:
    if raw is None or isinstance(raw, bool):
        return raw
    raise OracleValidationError("'authentic' must be a boolean or null")


def _build_confidence(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise OracleValidationError("'confidence' must be a number")
    if not 0 <= raw <= 100:
        raise OracleValidationError(f"'confidence' must be within 0-100, got {raw}")
    return float(raw)


def _build_issues(raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise OracleValidationError("'issues' must be a list of strings")
    return raw[:_MAX_ISSUES]


def _build_summary(raw: Any) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise OracleValidationError("'summary' must be a string")
    return raw
