from abc import ABC, abstractmethod

from docvault.oracle.models import AuthenticityContext, OracleVerdict


class BaseAuthenticityOracle(ABC):
    """Contract for all authenticity scoring adapters."""

    @abstractmethod
    def score_authenticity(self, preview: str, context: AuthenticityContext) -> OracleVerdict:
        """Judge whether a document image looks genuine.

        Args:
            preview: Base64-encoded image bytes.
            context: Name, type and size of the uploaded file.

        Returns:
            OracleVerdict with authentic, confidence (0-100), issues and summary.

        Raises:
            OracleUnavailableError: if the oracle declines to answer.
            OracleError: if the answer cannot be interpreted.
        """
