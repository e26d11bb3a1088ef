import os
import uuid
from collections.abc import Generator
from datetime import datetime, timezone
from importlib import resources
from types import MappingProxyType
from typing import Any

import psycopg
import pytest

from intake.application.models import ApplicationType, FinalizedApplication
from intake.config.settings import Settings
from intake.database.connection import close_pool, get_connection, init_pool
from intake.extraction.models import UploadedDocument


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "scholarship_test")
    return Settings(ledger_private_key="")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings, max_size=2)
        with get_connection() as conn:
            conn.execute(resources.files("intake.database").joinpath("schema.sql").read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    application_ids: list[str] = []
    yield application_ids
    if not application_ids:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for application_id in application_ids:
                cur.execute(
                    "DELETE FROM application_notarizations WHERE application_id = %s",
                    (application_id,),
                )
                cur.execute("DELETE FROM ocr_raw WHERE application_id = %s", (application_id,))
                cur.execute("DELETE FROM applications WHERE id = %s", (application_id,))
        conn.commit()


@pytest.fixture
def finalized_application(
    integration_cleanup: list[str],
    sample_pdf_bytes: bytes,
) -> FinalizedApplication:
    application_id = str(uuid.uuid4())
    integration_cleanup.append(application_id)
    return FinalizedApplication(
        id=application_id,
        application_type=ApplicationType.NEW,
        fields=MappingProxyType(
            {
                "full_name": "Juan Dela Cruz",
                "age": "19",
                "address": "123 Rizal St, Quezon City",
                "school": "Mapua University",
                "course": "BS Computer Science",
                "year_level": "2",
                "gwa": "1.75",
            }
        ),
        documents=(
            UploadedDocument(
                sample_pdf_bytes, "grades.pdf", "application/pdf", "certificate-of-grades"
            ),
        ),
        ocr_text=MappingProxyType({"certificate-of-grades": "General Weighted Average: 1.75"}),
        submitted_at=datetime.now(timezone.utc),
    )
