from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SkipReason(str, Enum):
    """Why an application was not notarized."""

    NO_SIGNING_KEY = "no_signing_key"
    NETWORK_ERROR = "network_error"
    TRANSACTION_REVERTED = "transaction_reverted"
    MISSING_RECEIPT = "missing_receipt"
    RECEIPT_TIMEOUT = "receipt_timeout"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class TransactionReceipt:
    """The parts of a mined transaction receipt the notary cares about."""

    transaction_hash: str
    block_number: int | None
    succeeded: bool


@dataclass(frozen=True)
class NotarizationRecord:
    """Audit entry tying a stored application to its on-ledger fingerprint.

    `captured_at` is the timestamp hashed into the fingerprint; together with
    the two identifiers it is enough to recompute the fingerprint.
    """

    application_id: str
    user_id: str
    fingerprint: str
    captured_at: datetime
    transaction_hash: str | None = None
    block_number: int | None = None
    confirmed: bool = False


@dataclass(frozen=True)
class Notarized:
    record: NotarizationRecord


@dataclass(frozen=True)
class Skipped:
    """A notarization that did not complete.

    `record` is set once a transaction was broadcast, so a transaction that
    is mined later can still be traced back to the application.
    """

    reason: SkipReason
    detail: str = ""
    record: NotarizationRecord | None = None


NotarizationOutcome = Notarized | Skipped
