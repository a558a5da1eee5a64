class AccountAdminError(Exception):
    """Raised when the auth admin API cannot complete a request."""


class AccountNotFoundError(AccountAdminError):
    """Raised when a user account or its email cannot be found."""


class NotificationError(Exception):
    """Raised when an administrative notification cannot be delivered."""
