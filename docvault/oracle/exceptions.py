class OracleError(Exception):
    """Raised when the authenticity oracle returns something unusable."""


class OracleValidationError(OracleError):
    """Raised when the oracle's verdict fails domain validation."""


class OracleUnavailableError(OracleError):
    """Raised when the oracle declines to give an opinion.

    Covers network failures, rate limiting and an exhausted budget. Absence
    of an opinion is never evidence against the uploader.
    """
