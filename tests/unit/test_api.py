from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from docvault.server.account_admin import BaseAccountAdmin
from docvault.server.api import create_app
from docvault.server.enforcement_service import EnforcementService
from docvault.server.exceptions import AccountAdminError
from docvault.server.verification_service import VerificationService
from docvault.verification.schemas import (
    CheckResult,
    EnforcementResult,
    ServerResults,
    ServerVerdict,
)

_AUTH = {"Authorization": "Bearer good-token"}
_BUNDLE = {
    "sha256Hash": "f" * 64,
    "fileName": "lease.pdf",
    "fileSize": 2048,
    "mimeType": "application/pdf",
    "metadata": {"producer": "Writer"},
}


@pytest.fixture
def account_admin() -> MagicMock:
    admin = MagicMock(spec=BaseAccountAdmin)
    admin.resolve_user.side_effect = lambda token: "user-1" if token == "good-token" else None
    return admin


@pytest.fixture
def verification_service() -> MagicMock:
    service = MagicMock(spec=VerificationService)
    service.verify.return_value = ServerVerdict.from_results(
        ServerResults(duplicate_check=CheckResult(passed=False, reason="Document uploaded by 3 different users", count=3)),
        now=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    return service


@pytest.fixture
def enforcement_service() -> MagicMock:
    service = MagicMock(spec=EnforcementService)
    service.enforce.return_value = EnforcementResult(
        flag_recorded=True, event_recorded=True, blacklisted=True, suspended=True
    )
    return service


@pytest.fixture
def client(
    account_admin: MagicMock, verification_service: MagicMock, enforcement_service: MagicMock
) -> TestClient:
    app = create_app(
        verification_service=verification_service,
        enforcement_service=enforcement_service,
        account_admin=account_admin,
    )
    return TestClient(app)


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestVerifyDocument:
    def test_returns_camel_case_verdict(self, client: TestClient, verification_service: MagicMock) -> None:
        response = client.post("/verify-document", json=_BUNDLE, headers=_AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["verified"] is False
        assert body["criticalFailures"] == [
            {"check": "duplicateCheck", "reason": "Document uploaded by 3 different users"}
        ]
        assert body["results"]["duplicateCheck"]["count"] == 3
        assert "note" not in body["results"]["hashCheck"]

        user_id, bundle = verification_service.verify.call_args.args
        assert user_id == "user-1"
        assert bundle.sha256_hash == "f" * 64

    def test_missing_token_is_unauthorized(self, client: TestClient) -> None:
        assert client.post("/verify-document", json=_BUNDLE).status_code == 401

    def test_unknown_token_is_unauthorized(self, client: TestClient) -> None:
        response = client.post(
            "/verify-document", json=_BUNDLE, headers={"Authorization": "Bearer stolen"}
        )
        assert response.status_code == 401

    def test_invalid_body_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/verify-document", json={**_BUNDLE, "sha256Hash": "nope"}, headers=_AUTH
        )
        assert response.status_code == 422

    def test_auth_outage_is_service_unavailable(
        self, client: TestClient, account_admin: MagicMock
    ) -> None:
        account_admin.resolve_user.side_effect = AccountAdminError("down")
        assert client.post("/verify-document", json=_BUNDLE, headers=_AUTH).status_code == 503


class TestFlagFraudulentAccount:
    def test_flags_own_account(self, client: TestClient, enforcement_service: MagicMock) -> None:
        response = client.post(
            "/flag-fraudulent-account",
            json={"userId": "user-1", "reason": "signature mismatch", "fileName": "fake.pdf"},
            headers=_AUTH,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Account flagged and suspended"
        assert body["result"]["blacklisted"] is True
        request = enforcement_service.enforce.call_args.args[0]
        assert request.user_id == "user-1"
        assert request.file_name == "fake.pdf"

    def test_other_account_is_forbidden(self, client: TestClient, enforcement_service: MagicMock) -> None:
        response = client.post(
            "/flag-fraudulent-account",
            json={"userId": "user-2", "reason": "x", "fileName": "a.pdf"},
            headers=_AUTH,
        )
        assert response.status_code == 403
        enforcement_service.enforce.assert_not_called()

    def test_incomplete_suspension_is_not_success(
        self, client: TestClient, enforcement_service: MagicMock
    ) -> None:
        enforcement_service.enforce.return_value = EnforcementResult(flag_recorded=True)
        response = client.post(
            "/flag-fraudulent-account",
            json={"userId": "user-1", "reason": "x", "fileName": "a.pdf"},
            headers=_AUTH,
        )
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Account flagged; suspension incomplete"
