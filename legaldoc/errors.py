class LegalDocError(Exception):
    """Base class for failures reported inside analysis results."""


class InsufficientContent(LegalDocError):
    def __init__(self, length: int, minimum: int):
        super().__init__(f"Insufficient content extracted ({length} chars, need {minimum})")
        self.length = length
        self.minimum = minimum


class AnalysisFailure(LegalDocError):
    """Unexpected fault while probing, scoring or chunking a page."""


class InvalidOptions(LegalDocError, ValueError):
    pass
