"""Error taxonomy of the candidate pipeline.

Every failure here is local: a rejected operation never leaves the candidate
store half-updated.
"""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(PipelineError):
    """The operation was refused before any mutation (bad input, empty selection...)."""


class NotFoundError(PipelineError):
    """A referenced record no longer exists."""


class TransientSendError(PipelineError):
    """Feedback delivery failed; the queue item stays current and can be retried."""
