import pytest

from docvault.oracle.exceptions import OracleValidationError
from docvault.oracle.validator import validate_and_build


class TestValidateAndBuild:
    def test_builds_full_verdict(self) -> None:
        verdict = validate_and_build(
            {"authentic": True, "confidence": 87.5, "issues": ["minor blur"], "summary": "Fine"}
        )
        assert verdict.authentic is True
        assert verdict.confidence == 87.5
        assert verdict.issues == ["minor blur"]
        assert verdict.summary == "Fine"

    def test_optional_fields_default(self) -> None:
        verdict = validate_and_build({"authentic": None, "confidence": 0})
        assert verdict.authentic is None
        assert verdict.issues == []
        assert verdict.summary == ""

    @pytest.mark.parametrize("confidence", [-1, 101, "90", True, None])
    def test_rejects_bad_confidence(self, confidence: object) -> None:
        with pytest.raises(OracleValidationError, match="confidence"):
            validate_and_build({"authentic": True, "confidence": confidence})

    def test_rejects_non_boolean_authentic(self) -> None:
        with pytest.raises(OracleValidationError, match="authentic"):
            validate_and_build({"authentic": "false", "confidence": 10})

    def test_rejects_non_string_issues(self) -> None:
        with pytest.raises(OracleValidationError, match="issues"):
            validate_and_build({"authentic": False, "confidence": 10, "issues": [1, 2]})

    def test_rejects_non_string_summary(self) -> None:
        with pytest.raises(OracleValidationError, match="summary"):
            validate_and_build({"authentic": False, "confidence": 10, "summary": {"text": "x"}})

    def test_truncates_long_issue_lists(self) -> None:
        verdict = validate_and_build(
            {"authentic": False, "confidence": 10, "issues": [f"issue {i}" for i in range(80)]}
        )
        assert len(verdict.issues) == 50
