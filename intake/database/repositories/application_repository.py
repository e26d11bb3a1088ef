from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from intake.application.models import ApplicationStatus, FinalizedApplication
from intake.database.connection import PoolNotInitializedError, get_connection
from intake.database.models import ApplicationRecord
from intake.submission.exceptions import ApplicationNotFoundError, PersistenceError


class ApplicationRepository:
    """Database operations for the applications and ocr_raw tables."""

    def persist(self, application: FinalizedApplication, user_id: str) -> str:
        """Store a finalized application and queue it for notarization.

        Idempotent on the application id: resubmitting the same snapshot
        neither duplicates the row nor its OCR text or notarization entry.

        Returns:
            The stored application id.

        Raises:
            PersistenceError: if the store rejects the write or is unreachable.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO applications (
                            id, user_id, status, application_type,
                            application_details, documents, created_at, updated_at
                        )
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        ON CONFLICT (id) DO NOTHING
                        """,
                        (
                            application.id,
                            user_id,
                            ApplicationStatus.PENDING.value,
                            application.application_type.value,
                            Jsonb(application.details_payload()),
                            Jsonb(application.document_references()),
                            application.submitted_at,
                            application.submitted_at,
                        ),
                    )
                    for file_type, raw_text in application.ocr_text.items():
                        if not raw_text:
                            continue
                        cur.execute(
                            """
                            INSERT INTO ocr_raw (application_id, user_id, file_type, raw_text)
                            VALUES (%s, %s, %s, %s)
                            ON CONFLICT (application_id, file_type) DO NOTHING
                            """,
                            (application.id, user_id, file_type, raw_text),
                        )
                    cur.execute(
                        """
                        INSERT INTO application_notarizations (application_id, user_id, status)
                        VALUES (%s, %s, 'pending')
                        ON CONFLICT (application_id) DO NOTHING
                        """,
                        (application.id, user_id),
                    )
                conn.commit()
        except (psycopg.Error, PoolNotInitializedError) as exc:
            raise PersistenceError(f"Failed to store application {application.id}: {exc}") from exc
        return application.id

    def find_by_id(self, application_id: str) -> ApplicationRecord:
        """Find a stored application by id.

        Raises:
            ApplicationNotFoundError: if no application with this id exists.
            PersistenceError: on database failure.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT id, user_id, status, application_type,
                               application_details, documents, created_at, updated_at
                        FROM applications
                        WHERE id = %s
                        """,
                        (application_id,),
                    )
                    row = cur.fetchone()
        except (psycopg.Error, PoolNotInitializedError) as exc:
            raise PersistenceError(f"Failed to load application {application_id}: {exc}") from exc

        if row is None:
            raise ApplicationNotFoundError(f"Application {application_id} not found")
        return _to_record(row)


def _to_record(row: dict[str, Any]) -> ApplicationRecord:
    return ApplicationRecord(
        id=str(row["id"]),
        user_id=row["user_id"],
        status=row["status"],
        application_type=row["application_type"],
        application_details=row["application_details"] or {},
        documents=row["documents"] or [],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
