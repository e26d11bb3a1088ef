from dataclasses import dataclass
from datetime import datetime


@dataclass
class ApplicationRecord:
    """Represents a row from the applications table."""

    id: str
    user_id: str
    status: str
    application_type: str
    application_details: dict[str, object]
    documents: list[dict[str, object]]
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class NotarizationJob:
    """Represents a row from the application_notarizations table."""

    application_id: str
    user_id: str
    status: str
    fingerprint: str | None = None
    captured_at: datetime | None = None
    transaction_hash: str | None = None
    block_number: int | None = None
    skip_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
