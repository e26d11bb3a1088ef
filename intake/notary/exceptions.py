class LedgerError(Exception):
    """Base exception for ledger client failures."""


class SigningKeyMissingError(LedgerError):
    """Raised when a transaction is requested but no signing key is configured."""


class LedgerNetworkError(LedgerError):
    """Raised when the RPC endpoint cannot be reached or rejects the request."""


class TransactionRevertedError(LedgerError):
    """Raised when a mined transaction reports a failed status."""


class MissingReceiptError(LedgerError):
    """Raised when the node returns no receipt for a sent transaction."""


class ReceiptTimeoutError(LedgerError):
    """Raised when the confirmation wait runs out before the transaction is mined."""
