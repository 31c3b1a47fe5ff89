"""Domain exceptions raised by the derivation services"""


class TransitDataError(Exception):
    """Base exception for transit data operations"""

    code = "TRANSIT_DATA_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(self.message)


class NotFoundError(TransitDataError):
    """Referenced entity does not exist in the project"""

    code = "NOT_FOUND"


class ValidationFailedError(TransitDataError):
    """Input failed validation; nothing was written"""

    code = "VALIDATION_FAILED"


class ConflictError(TransitDataError):
    """Write would duplicate an existing record"""

    code = "CONFLICT"


class OverlappingFrequencyError(ConflictError):
    """Frequency window overlaps another window of the same trip"""

    code = "OVERLAPPING_FREQUENCY"


class NoTopologyError(TransitDataError):
    """Route has no stops assigned for the requested direction"""

    code = "NO_TOPOLOGY"
