import time
from collections import Counter

from intake.config.settings import Settings
from intake.database.connection import get_connection
from intake.database.models import NotarizationJob
from intake.database.repositories.notarization_repository import NotarizationRepository
from intake.logging.logger import Log
from intake.notary.models import Notarized
from intake.worker.notarization_runner import NotarizationRunner


class NotarizationWorker:
    """Poll loop: sleep -> claim a stored application's notarization -> notarize once."""

    def __init__(
        self,
        notarization_repo: NotarizationRepository,
        runner: NotarizationRunner,
        settings: Settings,
    ) -> None:
        self._notarization_repo = notarization_repo
        self._runner = runner
        self._settings = settings
        self._tally: Counter[str] = Counter()

    @property
    def tally(self) -> dict[str, int]:
        """Notarized and skipped counts since the worker started."""
        return {"notarized": self._tally["notarized"], "skipped": self._tally["skipped"]}

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after processing that many notarizations.
        """
        Log.info("Notarization worker started, polling for stored applications")
        jobs_done = 0
        try:
            while max_jobs is None or jobs_done < max_jobs:
                job = self._try_claim_job()
                if job:
                    outcome = self._runner.run(job)
                    self._tally["notarized" if isinstance(outcome, Notarized) else "skipped"] += 1
                    jobs_done += 1
                else:
                    Log.debug("No stored applications awaiting notarization, sleeping")
                    time.sleep(self._settings.notarization_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Notarization worker shutting down gracefully")
        Log.info(
            f"Notarization worker stopped: {self._tally['notarized']} notarized, "
            f"{self._tally['skipped']} skipped"
        )

    def _try_claim_job(self) -> NotarizationJob | None:
        """Claim the next stored application awaiting notarization. DB errors are retried."""
        try:
            with get_connection() as conn:
                job = self._notarization_repo.claim_next_pending(conn)
        except Exception as exc:
            Log.warning(f"Could not claim a pending notarization, will retry: {exc}")
            return None
        if job is not None:
            Log.debug(f"Claimed notarization of application {job.application_id}")
        return job
