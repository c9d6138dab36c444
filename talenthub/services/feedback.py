"""Feedback templates and the (simulated) delivery of feedback messages."""

import asyncio
from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from talenthub.core.errors import NotFoundError
from talenthub.models.candidate import Candidate
from talenthub.models.feedback_template import FeedbackTemplate

logger = structlog.get_logger()

ACTIONS = ("approve", "reject")
# Plain feedback, sent without a decision.
FEEDBACK_ACTION = "feedback"
TEMPLATE_TYPE_BY_ACTION = {"approve": "acceptance", "reject": "rejection"}


@dataclass
class FeedbackSubmission:
    template_id: UUID
    content: str
    subject: str
    attachment_name: str | None = None


@dataclass
class FeedbackDraft:
    template_id: UUID
    subject: str
    content: str


class TemplateCatalog:
    """Read-only access to the feedback template catalog."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def list_all(self, type: str | None = None) -> list[FeedbackTemplate]:
        query = select(FeedbackTemplate)
        if type:
            query = query.where(FeedbackTemplate.type == type)
        query = query.order_by(FeedbackTemplate.created_at, FeedbackTemplate.title)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get(self, template_id: UUID) -> FeedbackTemplate:
        async with self._session_factory() as session:
            template = await session.get(FeedbackTemplate, template_id)
        if template is None:
            raise NotFoundError("Feedback template not found", template_id=str(template_id))
        return template

    async def add(self, template: FeedbackTemplate) -> FeedbackTemplate:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(template)
        return template


def templates_for_action(
    templates: list[FeedbackTemplate], action: str, limit: int = 3
) -> list[FeedbackTemplate]:
    """Templates offered for an action: matching type, first ``limit`` in catalog order."""
    wanted = TEMPLATE_TYPE_BY_ACTION[action]
    return [t for t in templates if t.type == wanted][:limit]


def position_label(candidate: Candidate) -> str:
    return candidate.role or candidate.form_title or ""


def fill_placeholders(text: str, candidate: Candidate) -> str:
    text = text.replace("{candidate_name}", candidate.name)
    return text.replace("{position}", position_label(candidate))


def default_subject(action: str, candidate: Candidate) -> str:
    position = position_label(candidate) or "Position"
    if action == "approve":
        return f"Congratulations! Application for {position}"
    return f"Re: Application for {position}"


def build_draft(template: FeedbackTemplate, candidate: Candidate, action: str) -> FeedbackDraft:
    if template.subject:
        subject = fill_placeholders(template.subject, candidate)
    else:
        subject = default_subject(action, candidate)
    return FeedbackDraft(
        template_id=template.id,
        subject=subject,
        content=fill_placeholders(template.content, candidate),
    )


class SimulatedFeedbackSender:
    """Stands in for the mail API: waits a fixed delay, never retries."""

    def __init__(self, delay_seconds: float = 1.0):
        self.delay_seconds = delay_seconds

    async def send(self, candidate: Candidate, submission: FeedbackSubmission) -> None:
        await asyncio.sleep(self.delay_seconds)
        logger.info(
            "feedback_sent",
            candidate_id=str(candidate.id),
            template_id=str(submission.template_id),
            subject=submission.subject,
            attachment=submission.attachment_name,
        )
