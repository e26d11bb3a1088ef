from intake.notary.models import (
    NotarizationOutcome,
    NotarizationRecord,
    Notarized,
    SkipReason,
    Skipped,
)
from intake.notary.notary import BlockchainNotary, build_notary

__all__ = [
    "BlockchainNotary",
    "NotarizationOutcome",
    "NotarizationRecord",
    "Notarized",
    "SkipReason",
    "Skipped",
    "build_notary",
]
