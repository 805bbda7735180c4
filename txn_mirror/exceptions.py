"""Custom exception hierarchy for txn-mirror."""


class MirrorError(Exception):
    """Base exception for all txn-mirror errors."""


class FetchError(MirrorError):
    """Raised when the upstream change feed cannot be fully consumed.

    Fatal to the current sync cycle: no cursor or store write happens.
    """


class TransportError(FetchError):
    """Raised on a non-success response or a failed HTTP exchange."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamLogicError(FetchError):
    """Raised when a successful response carries an application error code."""

    def __init__(self, error_code: str, error_message: str | None = None) -> None:
        super().__init__(f"{error_code}: {error_message or 'no message'}")
        self.error_code = error_code
        self.error_message = error_message


class DataShapeError(MirrorError):
    """Raised when an upstream payload is missing or mistypes a field."""


class UnresolvedReferenceError(MirrorError):
    """A modified entry references a transaction the store never captured.

    Non-fatal: collected and logged by the reconciliation engine, not raised.
    """

    def __init__(self, transaction_id: str) -> None:
        super().__init__(f"Transaction {transaction_id} not found in store")
        self.transaction_id = transaction_id


class StoreError(MirrorError):
    """Raised when the record store cannot be read or written."""


class ConfigurationError(MirrorError):
    """Raised when configuration is invalid or missing."""
