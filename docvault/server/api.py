"""HTTP surface of the verification backend."""

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from docvault.config.settings import Settings
from docvault.database.repositories.enforcement_repository import EnforcementRepository
from docvault.database.repositories.verification_repository import VerificationRepository
from docvault.logging.logger import Log
from docvault.oracle.factory import OracleFactory
from docvault.server.account_admin import BaseAccountAdmin, GoTrueAccountAdmin
from docvault.server.enforcement_service import EnforcementService
from docvault.server.exceptions import AccountAdminError
from docvault.server.notifier import WebhookEmailNotifier
from docvault.server.verification_service import VerificationService
from docvault.verification.schemas import (
    EnforcementRequest,
    EnforcementResponse,
    ServerVerdict,
    VerificationBundle,
)

bearer_scheme = HTTPBearer(auto_error=False)


def create_app(
    *,
    verification_service: VerificationService,
    enforcement_service: EnforcementService,
    account_admin: BaseAccountAdmin,
) -> FastAPI:
    app = FastAPI(title="Document Vault Verification Service", version="1.0.0")

    def require_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    ) -> str:
        if credentials is None or not credentials.credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing bearer token",
                headers={"WWW-Authenticate": "Bearer"},
            )
        try:
            user_id = account_admin.resolve_user(credentials.credentials)
        except AccountAdminError as exc:
            Log.error(f"Token resolution failed: {exc}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            ) from exc
        if user_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return user_id

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/verify-document",
        response_model=ServerVerdict,
        response_model_exclude_none=True,
    )
    def verify_document(
        bundle: VerificationBundle,
        user_id: str = Depends(require_user),
    ) -> ServerVerdict:
        return verification_service.verify(user_id, bundle)

    @app.post(
        "/flag-fraudulent-account",
        response_model=EnforcementResponse,
    )
    def flag_fraudulent_account(
        request: EnforcementRequest,
        user_id: str = Depends(require_user),
    ) -> EnforcementResponse:
        if request.user_id != user_id:
            Log.warning(f"User {user_id} tried to flag another account ({request.user_id})")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Accounts can only be flagged by their own session",
            )

        result = enforcement_service.enforce(request)
        if result.core_succeeded:
            message = "Account flagged and suspended"
        elif result.flag_recorded:
            message = "Account flagged; suspension incomplete"
        else:
            message = "Enforcement failed"
        return EnforcementResponse(success=result.core_succeeded, message=message, result=result)

    return app


def build_app(settings: Settings) -> FastAPI:
    """Wire repositories, collaborators and services from settings."""
    account_admin = GoTrueAccountAdmin(
        base_url=settings.auth_admin_url,
        service_key=settings.auth_service_key,
        timeout_seconds=settings.service_timeout_seconds,
    )
    notifier = None
    if settings.admin_notification_url and settings.admin_notification_email:
        notifier = WebhookEmailNotifier(
            url=settings.admin_notification_url,
            recipient=settings.admin_notification_email,
            timeout_seconds=settings.service_timeout_seconds,
        )
    else:
        Log.warning("Admin notifications are not configured")

    verification_service = VerificationService(
        repository=VerificationRepository(),
        oracle=OracleFactory.create(settings),
        restricted_editors=settings.restricted_editors,
        duplicate_threshold=settings.duplicate_threshold,
        rapid_edit_seconds=settings.rapid_edit_seconds,
        ai_confidence_override=settings.ai_confidence_override,
    )
    enforcement_service = EnforcementService(
        repository=EnforcementRepository(),
        account_admin=account_admin,
        notifier=notifier,
        ban_duration=settings.ban_duration,
    )
    return create_app(
        verification_service=verification_service,
        enforcement_service=enforcement_service,
        account_admin=account_admin,
    )
