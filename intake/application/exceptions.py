class StepMachineError(Exception):
    """Raised when the wizard is driven in a way that is never valid (e.g. editing after finalize)."""
