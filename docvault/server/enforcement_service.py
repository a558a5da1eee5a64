from collections.abc import Callable

from docvault.database.models import AccountFlag, BlacklistEntry, SecurityEvent
from docvault.database.repositories.enforcement_repository import EnforcementRepository
from docvault.logging.logger import Log
from docvault.server.account_admin import BaseAccountAdmin
from docvault.server.notifier import BaseNotifier
from docvault.verification.schemas import EnforcementRequest, EnforcementResult


class EnforcementService:
    """Apply every punitive action for a rejected upload.

    Each action is attempted even when an earlier one fails, and the
    outcome of each is reported separately on the result. The request only
    ever acts on its own account: the hash it carries is recorded on the
    security event and never marks the content itself as flagged.
    """

    def __init__(
        self,
        *,
        repository: EnforcementRepository,
        account_admin: BaseAccountAdmin,
        notifier: BaseNotifier | None,
        ban_duration: str = "876000h",
    ) -> None:
        self._repository = repository
        self._account_admin = account_admin
        self._notifier = notifier
        self._ban_duration = ban_duration

    def enforce(self, request: EnforcementRequest) -> EnforcementResult:
        Log.warning(f"Enforcing against user {request.user_id}: {request.reason}")
        result = EnforcementResult(
            flag_recorded=self._attempt("record account flag", lambda: self._flag_account(request)),
            event_recorded=self._attempt("record security event", lambda: self._record_event(request)),
        )

        email = self._lookup_email(request.user_id)
        if email is not None:
            result.blacklisted = self._attempt("blacklist email", lambda: self._blacklist(email, request))
        result.suspended = self._attempt(
            "ban account",
            lambda: self._account_admin.ban_user(request.user_id, self._ban_duration),
        )

        notifier = self._notifier
        if notifier is not None:
            result.notified = self._attempt(
                "notify admin", lambda: self._notify(notifier, request, email)
            )

        Log.info(
            f"Enforcement for user {request.user_id} finished: "
            f"{result.model_dump()}"
        )
        return result

    def _flag_account(self, request: EnforcementRequest) -> None:
        self._repository.insert_account_flag(
            AccountFlag(
                user_id=request.user_id,
                reason=request.reason,
                flagged_document_name=request.file_name or None,
            )
        )

    def _record_event(self, request: EnforcementRequest) -> None:
        self._repository.insert_security_event(
            SecurityEvent(
                user_id=request.user_id,
                event_type="fraud_detected",
                event_description=f"Fraudulent document upload detected: {request.reason}",
                metadata={
                    "file_name": request.file_name,
                    "reason": request.reason,
                    "sha256_hash": request.sha256_hash,
                    "action": "account_suspended",
                },
            )
        )

    def _lookup_email(self, user_id: str) -> str | None:
        try:
            return self._account_admin.get_user_email(user_id)
        except Exception as exc:
            Log.error(f"Could not look up email for user {user_id}: {exc}")
            return None

    def _blacklist(self, email: str, request: EnforcementRequest) -> None:
        if self._repository.is_email_blacklisted(email):
            Log.info(f"{email} is already blacklisted, refreshing entry")
        self._repository.upsert_blacklist(
            BlacklistEntry(
                email=email,
                reason=f"Fraudulent upload: {request.reason}. File: {request.file_name}",
                associated_user_id=request.user_id,
            )
        )

    @staticmethod
    def _notify(notifier: BaseNotifier, request: EnforcementRequest, email: str | None) -> None:
        notifier.notify(
            subject=f"Account suspended: {email or request.user_id}",
            body=(
                f"User {request.user_id} ({email or 'unknown email'}) was suspended.\n"
                f"Reason: {request.reason}\n"
                f"File: {request.file_name or 'unknown'}"
            ),
        )

    @staticmethod
    def _attempt(action: str, operation: Callable[[], None]) -> bool:
        try:
            operation()
        except Exception as exc:
            Log.error(f"Enforcement action '{action}' failed: {exc}")
            return False
        Log.info(f"Enforcement action '{action}' succeeded")
        return True
