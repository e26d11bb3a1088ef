"""Anchors application fingerprints on a public ledger.

Notarization is best effort: every failure becomes a `Skipped` outcome so
that submitting an application never depends on the ledger being up.
There is exactly one attempt per call and no retry.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from intake.config.settings import Settings
from intake.logging.logger import Log
from intake.notary.exceptions import (
    LedgerError,
    LedgerNetworkError,
    MissingReceiptError,
    ReceiptTimeoutError,
    SigningKeyMissingError,
)
from intake.notary.fingerprint import application_fingerprint
from intake.notary.ledger_client import LedgerClient, build_ledger_client, is_transaction_hash
from intake.notary.models import (
    NotarizationOutcome,
    NotarizationRecord,
    Notarized,
    SkipReason,
    Skipped,
)

_SKIP_REASONS: dict[type[LedgerError], SkipReason] = {
    SigningKeyMissingError: SkipReason.NO_SIGNING_KEY,
    LedgerNetworkError: SkipReason.NETWORK_ERROR,
    MissingReceiptError: SkipReason.MISSING_RECEIPT,
    ReceiptTimeoutError: SkipReason.RECEIPT_TIMEOUT,
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlockchainNotary:
    def __init__(
        self,
        ledger: LedgerClient,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._ledger = ledger
        self._clock = clock

    def notarize(self, application_id: str, user_id: str) -> NotarizationOutcome:
        """Record a fingerprint of the application on the ledger. Never raises."""
        if not self._ledger.can_sign:
            Log.warning(f"Notarization skipped for {application_id}: no signing key configured")
            return Skipped(SkipReason.NO_SIGNING_KEY, "No ledger signing key configured")

        captured_at = self._clock()
        fingerprint = application_fingerprint(application_id, user_id, captured_at)
        try:
            tx_hash = self._ledger.send_data_transaction(fingerprint)
        except Exception as exc:
            return self._skipped(application_id, exc)
        Log.info(f"Notarization transaction {tx_hash} sent for application {application_id}")

        pending = NotarizationRecord(
            application_id=application_id,
            user_id=user_id,
            fingerprint=fingerprint,
            captured_at=captured_at,
            transaction_hash=tx_hash,
        )
        try:
            receipt = self._ledger.wait_for_receipt(tx_hash)
        except Exception as exc:
            return self._skipped(application_id, exc, pending)

        if not receipt.succeeded:
            Log.warning(f"Notarization transaction {receipt.transaction_hash} reverted")
            return Skipped(
                SkipReason.TRANSACTION_REVERTED,
                f"Transaction {receipt.transaction_hash} reverted",
                replace(pending, block_number=receipt.block_number),
            )

        Log.info(
            f"Application {application_id} notarized in block {receipt.block_number} "
            f"({receipt.transaction_hash})"
        )
        return Notarized(
            replace(
                pending,
                transaction_hash=receipt.transaction_hash,
                block_number=receipt.block_number,
                confirmed=True,
            )
        )

    @staticmethod
    def _skipped(
        application_id: str, exc: Exception, record: NotarizationRecord | None = None
    ) -> Skipped:
        if isinstance(exc, LedgerError):
            reason = _SKIP_REASONS.get(type(exc), SkipReason.UNEXPECTED_ERROR)
            Log.warning(f"Notarization skipped for {application_id} ({reason.value}): {exc}")
        else:
            reason = SkipReason.UNEXPECTED_ERROR
            Log.exception(f"Unexpected notarization failure for {application_id}: {exc}")
        return Skipped(reason, str(exc), record)

    def log_application_to_blockchain(self, application_id: str, user_id: str) -> str | None:
        """Transaction hash of a successful notarization, or None."""
        outcome = self.notarize(application_id, user_id)
        if isinstance(outcome, Notarized):
            return outcome.record.transaction_hash
        return None

    def verify_transaction(self, tx_hash: str) -> bool:
        """True only if the transaction is mined with a success status. Never raises."""
        if not is_transaction_hash(tx_hash):
            return False
        try:
            receipt = self._ledger.get_receipt(tx_hash)
        except Exception as exc:
            Log.warning(f"Could not verify transaction {tx_hash}: {exc}")
            return False
        return receipt is not None and receipt.succeeded


def build_notary(settings: Settings) -> BlockchainNotary:
    """Build a BlockchainNotary backed by the configured ledger."""
    if not settings.notarization_enabled:
        Log.warning("Ledger signing key is not configured - notarization will be skipped")
    return BlockchainNotary(build_ledger_client(settings))
