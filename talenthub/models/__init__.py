from talenthub.models.candidate import ApplicationHistory, Candidate, FeedbackHistory
from talenthub.models.feedback_template import FeedbackTemplate
from talenthub.models.job_opening import JobOpening, Wave

__all__ = [
    "JobOpening",
    "Wave",
    "Candidate",
    "ApplicationHistory",
    "FeedbackHistory",
    "FeedbackTemplate",
]
