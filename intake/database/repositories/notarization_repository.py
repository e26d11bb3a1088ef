from typing import Any

import psycopg
from psycopg.rows import dict_row

from intake.database.connection import PoolNotInitializedError, get_connection
from intake.database.models import NotarizationJob
from intake.notary.models import NotarizationRecord, SkipReason
from intake.submission.exceptions import PersistenceError

_COLUMNS = """
    application_id, user_id, status, fingerprint, captured_at,
    transaction_hash, block_number, skip_reason, created_at, updated_at
"""


class NotarizationRepository:
    """Database operations for the application_notarizations table."""

    def claim_next_pending(self, conn: psycopg.Connection[Any]) -> NotarizationJob | None:
        """Claim the oldest pending notarization using SELECT FOR UPDATE SKIP LOCKED.

        A claimed row moves to 'processing' and is never handed out again,
        which is what limits each application to a single notary attempt.
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT application_id, user_id
                FROM application_notarizations
                WHERE status = 'pending'
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE application_notarizations
            SET status = 'processing', updated_at = NOW()
            WHERE application_id = %s
            """,
            (row["application_id"],),
        )
        conn.commit()

        return NotarizationJob(
            application_id=str(row["application_id"]),
            user_id=row["user_id"],
            status="processing",
        )

    def attach_notarization(
        self,
        application_id: str,
        record: NotarizationRecord | None,
        skip_reason: SkipReason | None = None,
    ) -> bool:
        """Complete the notarization entry of a stored application.

        Without `skip_reason` the record marks it notarized. With one it is
        marked skipped; a record passed along with the reason (a transaction
        that was broadcast but never confirmed) is stored as its reference.
        Entries that are already complete are left untouched.

        Returns:
            True if the entry was updated.

        Raises:
            PersistenceError: on database failure.
        """
        if record is not None and skip_reason is None:
            status, reason = "notarized", None
        else:
            status, reason = "skipped", (skip_reason or SkipReason.UNEXPECTED_ERROR).value

        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE application_notarizations
                        SET status = %s, skip_reason = %s, fingerprint = %s,
                            captured_at = %s, transaction_hash = %s, block_number = %s,
                            updated_at = NOW()
                        WHERE application_id = %s AND status IN ('pending', 'processing')
                        """,
                        (
                            status,
                            reason,
                            record.fingerprint if record else None,
                            record.captured_at if record else None,
                            record.transaction_hash if record else None,
                            record.block_number if record else None,
                            application_id,
                        ),
                    )
                    updated = cur.rowcount > 0
                conn.commit()
        except (psycopg.Error, PoolNotInitializedError) as exc:
            raise PersistenceError(
                f"Failed to attach notarization to application {application_id}: {exc}"
            ) from exc
        return updated

    def find_by_application_id(self, application_id: str) -> NotarizationJob | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"SELECT {_COLUMNS} FROM application_notarizations "
                        "WHERE application_id = %s",
                        (application_id,),
                    )
                    row = cur.fetchone()
        except (psycopg.Error, PoolNotInitializedError) as exc:
            raise PersistenceError(
                f"Failed to load notarization of application {application_id}: {exc}"
            ) from exc

        if row is None:
            return None

        return NotarizationJob(
            application_id=str(row["application_id"]),
            user_id=row["user_id"],
            status=row["status"],
            fingerprint=row["fingerprint"],
            captured_at=row["captured_at"],
            transaction_hash=row["transaction_hash"],
            block_number=row["block_number"],
            skip_reason=row["skip_reason"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
