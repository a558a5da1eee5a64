import httpx
from pydantic import ValidationError

from docvault.logging.logger import Log
from docvault.verification.exceptions import ServiceUnavailableError
from docvault.verification.schemas import (
    EnforcementRequest,
    EnforcementResponse,
    EnforcementResult,
    ServerVerdict,
    VerificationBundle,
)


class VerificationBackendClient:
    """Authenticated calls to the verification and enforcement endpoints.

    Each call is a single round trip bounded by one timeout. Calls are never
    retried: a repeated verification would be recorded as another upload of
    the same hash.
    """

    def __init__(
        self,
        *,
        verify_url: str,
        enforce_url: str,
        access_token: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._verify_url = verify_url
        self._enforce_url = enforce_url
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    async def verify(self, bundle: VerificationBundle) -> ServerVerdict:
        """Submit a bundle and return the aggregate verdict.

        Raises:
            ServiceUnavailableError: on transport error, timeout, non-2xx
                status or an unreadable response.
        """
        payload = await self._post(self._verify_url, bundle.to_wire())
        try:
            return ServerVerdict.model_validate(payload)
        except ValidationError as exc:
            raise ServiceUnavailableError(f"Malformed verification response: {exc}") from exc

    async def flag_account(
        self,
        *,
        user_id: str,
        reason: str,
        file_name: str,
        sha256_hash: str | None = None,
    ) -> EnforcementResult:
        """Ask the backend to flag, blacklist and suspend the account.

        Raises:
            ServiceUnavailableError: if the enforcement call cannot complete.
        """
        request = EnforcementRequest(
            user_id=user_id,
            reason=reason,
            file_name=file_name,
            sha256_hash=sha256_hash,
        )
        payload = await self._post(self._enforce_url, request.to_wire())
        try:
            response = EnforcementResponse.model_validate(payload)
        except ValidationError as exc:
            raise ServiceUnavailableError(f"Malformed enforcement response: {exc}") from exc
        Log.info(f"Enforcement for user {user_id}: {response.message}")
        return response.result

    async def _post(self, url: str, body: dict[str, object]) -> object:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=body)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as exc:
            raise ServiceUnavailableError(f"Request to {url} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise ServiceUnavailableError(
                f"Request to {url} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ServiceUnavailableError(f"Request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise ServiceUnavailableError(f"Response from {url} is not JSON: {exc}") from exc
