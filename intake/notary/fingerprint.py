from datetime import datetime, timezone

from eth_utils import keccak


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def application_fingerprint(application_id: str, user_id: str, captured_at: datetime) -> str:
    """keccak-256 over `"{application_id}-{user_id}-{timestamp}"`, 0x-prefixed hex."""
    payload = f"{application_id}-{user_id}-{iso_timestamp(captured_at)}"
    return "0x" + keccak(text=payload).hex()
