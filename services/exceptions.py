"""
Service-layer exceptions
"""


class ReliefTriageError(Exception):
    """Base class for errors raised by the service layer."""
    pass


class RecordNotFoundError(ReliefTriageError):
    """Raised when an update targets a record the store does not hold."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class IntakeValidationError(ReliefTriageError):
    """Raised when a submission cannot become a record."""
    pass
