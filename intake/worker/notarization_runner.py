from intake.database.models import NotarizationJob
from intake.logging.logger import Log
from intake.notary.models import NotarizationOutcome
from intake.submission.orchestrator import SubmissionOrchestrator


class NotarizationRunner:
    """Run one claimed notarization: a single notary attempt, then record the outcome."""

    def __init__(self, orchestrator: SubmissionOrchestrator) -> None:
        self._orchestrator = orchestrator

    def run(self, job: NotarizationJob) -> NotarizationOutcome:
        Log.info(f"Notarizing application {job.application_id}")
        outcome = self._orchestrator.notarize_now(job.application_id, job.user_id)
        Log.info(
            f"Notarization of application {job.application_id} finished: "
            f"{type(outcome).__name__.lower()}"
        )
        return outcome
