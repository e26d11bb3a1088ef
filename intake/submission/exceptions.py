class SubmissionError(Exception):
    """Base exception for submission failures."""


class PersistenceError(SubmissionError):
    """Raised when the application store rejects or cannot be reached.

    Retryable: resubmitting the same FinalizedApplication is idempotent.
    """


class ApplicationNotFoundError(SubmissionError):
    """Raised when a stored application cannot be found."""
