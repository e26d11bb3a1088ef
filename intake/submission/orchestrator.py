from dataclasses import dataclass

from intake.application.models import FinalizedApplication
from intake.database.repositories.application_repository import ApplicationRepository
from intake.database.repositories.notarization_repository import NotarizationRepository
from intake.logging.logger import Log
from intake.notary.models import NotarizationOutcome, Notarized, Skipped
from intake.notary.notary import BlockchainNotary
from intake.submission.exceptions import PersistenceError


@dataclass(frozen=True)
class SubmissionReceipt:
    stored_id: str
    submitted_at: str


class SubmissionOrchestrator:
    """Persists finalized applications, then hands them to the notary.

    Persistence must succeed before notarization is attempted; a failed or
    skipped notarization never fails the submission.
    """

    def __init__(
        self,
        application_repo: ApplicationRepository,
        notarization_repo: NotarizationRepository,
        notary: BlockchainNotary,
    ) -> None:
        self._application_repo = application_repo
        self._notarization_repo = notarization_repo
        self._notary = notary

    def submit(self, application: FinalizedApplication, user_id: str) -> SubmissionReceipt:
        """Store the application; notarization is queued for the background worker.

        Raises:
            PersistenceError: if the application could not be stored. The same
                snapshot can be submitted again.
        """
        try:
            stored_id = self._application_repo.persist(application, user_id)
        except PersistenceError as exc:
            Log.error(f"Submission of application {application.id} failed: {exc}")
            raise
        Log.info(f"Application {stored_id} stored for user {user_id}, notarization queued")
        return SubmissionReceipt(
            stored_id=stored_id,
            submitted_at=application.submitted_at.isoformat(),
        )

    def notarize_now(self, stored_id: str, user_id: str) -> NotarizationOutcome:
        """Notarize a stored application in the caller's thread and record the outcome."""
        outcome = self._notary.notarize(stored_id, user_id)
        self.attach_outcome(stored_id, outcome)
        return outcome

    def attach_outcome(self, stored_id: str, outcome: NotarizationOutcome) -> None:
        """Record a notary outcome; failing to record it is logged, not raised."""
        try:
            match outcome:
                case Notarized(record=record):
                    self._notarization_repo.attach_notarization(stored_id, record)
                case Skipped(reason=reason, record=record):
                    Log.info(f"Notarization skipped for application {stored_id}: {reason.value}")
                    self._notarization_repo.attach_notarization(stored_id, record, reason)
        except PersistenceError as exc:
            Log.error(f"Could not record notarization for application {stored_id}: {exc}")
