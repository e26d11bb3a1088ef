import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PRIVATE_KEY_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "scholarship"
    db_username: str = "scholarship"
    db_password: str = "secret"

    pdf_engine: str = "pymupdf"

    ocr_language: str = "eng"
    ocr_tesseract_cmd: str = "tesseract"
    ocr_psm_mode: int = 3

    ledger_rpc_url: str = "https://rpc-amoy.polygon.technology"
    ledger_chain_id: int = 80002
    ledger_private_key: str = ""
    ledger_burn_address: str = "0x000000000000000000000000000000000000dEaD"
    ledger_gas_limit: int = 25000
    ledger_receipt_timeout_seconds: int = 120

    notarization_poll_interval_seconds: int = 5

    @field_validator("ledger_private_key")
    @classmethod
    def _validate_private_key(cls, value: str) -> str:
        """An empty key disables notarization; anything else must be 0x + 64 hex chars."""
        value = value.strip()
        if not value:
            return ""
        if not value.startswith("0x"):
            raise ValueError("ledger_private_key must start with '0x'")
        if len(value) != 66:
            raise ValueError("ledger_private_key must be 66 characters (0x + 64 hex characters)")
        if not _PRIVATE_KEY_PATTERN.match(value):
            raise ValueError("ledger_private_key contains invalid hex characters")
        return value

    @property
    def notarization_enabled(self) -> bool:
        return bool(self.ledger_private_key)
