from intake.config.settings import Settings
from intake.database.connection import close_pool, init_pool
from intake.database.repositories.application_repository import ApplicationRepository
from intake.database.repositories.notarization_repository import NotarizationRepository
from intake.logging.logger import Log
from intake.notary.notary import build_notary
from intake.submission.orchestrator import SubmissionOrchestrator
from intake.worker.notarization_runner import NotarizationRunner
from intake.worker.worker import NotarizationWorker


def build_orchestrator(settings: Settings) -> SubmissionOrchestrator:
    """Build a SubmissionOrchestrator wired to the database and the ledger."""
    return SubmissionOrchestrator(
        application_repo=ApplicationRepository(),
        notarization_repo=NotarizationRepository(),
        notary=build_notary(settings),
    )


def main() -> None:
    """Entry point: load settings -> initialize pool -> run the notarization worker."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        orchestrator = build_orchestrator(settings)
        worker = NotarizationWorker(
            NotarizationRepository(),
            NotarizationRunner(orchestrator),
            settings,
        )
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
