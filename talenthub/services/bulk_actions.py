"""Sequential feedback queue for approve/reject batches.

One candidate is presented at a time. Each submission is sent, then its side
effect is committed, then the queue advances; a batch is atomic per item only.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog

from talenthub.core.database import utcnow
from talenthub.core.errors import NotFoundError, ValidationError
from talenthub.models.candidate import Candidate
from talenthub.models.feedback_template import FeedbackTemplate
from talenthub.services.feedback import FeedbackDraft, FeedbackSubmission, build_draft

if TYPE_CHECKING:
    from talenthub.services.pipeline import CandidatePipeline

logger = structlog.get_logger()


@dataclass
class SubmitResult:
    done: bool
    remaining_count: int
    processed_id: UUID | None
    current_id: UUID | None
    summary: str | None = None


class BatchHandle:
    def __init__(
        self,
        pipeline: "CandidatePipeline",
        candidate_ids: list[UUID],
        action: str,
        context: str,
        templates: list[FeedbackTemplate],
    ):
        self.id = uuid4()
        self.action = action
        self.context = context
        self.templates = templates
        self.total = len(candidate_ids)
        self.current_id: UUID | None = candidate_ids[0]
        self.processed: list[UUID] = []
        self.skipped: list[UUID] = []
        self.state = "presenting"
        self.last_activity_at = utcnow()
        self._pending = deque(candidate_ids[1:])
        self._pipeline = pipeline
        self._sending = False

    @property
    def remaining_count(self) -> int:
        return len(self._pending) + (1 if self.current_id is not None else 0)

    @property
    def done(self) -> bool:
        return self.state == "completed"

    @property
    def active(self) -> bool:
        return self.state == "presenting"

    @property
    def sending(self) -> bool:
        return self._sending

    async def current_candidate(self) -> Candidate:
        self._ensure_active()
        return await self._pipeline.store.get(self.current_id)

    async def draft(self, template_id: UUID) -> FeedbackDraft:
        """Subject and content pre-filled for the current candidate."""
        template = self._offered(template_id)
        self.last_activity_at = utcnow()
        return build_draft(template, await self.current_candidate(), self.action)

    def summary(self) -> str:
        verb = "approved" if self.action == "approve" else "rejected"
        noun = "candidate" if self.total == 1 else "candidates"
        return f"Successfully {verb} {self.total} {noun} with feedback"

    async def submit(self, submission: FeedbackSubmission) -> SubmitResult:
        self._ensure_active()
        if self._sending:
            raise ValidationError("A feedback submission is already in progress")
        template = self._offered(submission.template_id)
        if not submission.content.strip() or not submission.subject.strip():
            raise ValidationError(
                "Please select a template, fill in subject, and ensure feedback content is not empty"
            )

        self._sending = True
        self.last_activity_at = utcnow()
        try:
            candidate_id = self.current_id
            candidate = await self._pipeline.store.find(candidate_id)
            if candidate is None:
                return self._skip(candidate_id)

            await self._pipeline.deliver(candidate, submission)
            try:
                await self._pipeline.commit_decision(
                    candidate_id, self.action, template, submission, self.context
                )
            except NotFoundError:
                return self._skip(candidate_id)
        finally:
            self._sending = False

        self.processed.append(candidate_id)
        return self._advance(candidate_id)

    def cancel(self) -> None:
        if self._sending:
            raise ValidationError("Cannot cancel while a feedback submission is in progress")
        if not self.active:
            return
        discarded = self.remaining_count
        self._close("cancelled")
        logger.info(
            "batch_cancelled",
            batch_id=str(self.id),
            processed=len(self.processed),
            discarded=discarded,
        )

    def expire(self) -> None:
        discarded = self.remaining_count
        self._close("expired")
        logger.warning(
            "batch_expired",
            batch_id=str(self.id),
            processed=len(self.processed),
            discarded=discarded,
        )

    def _close(self, state: str) -> None:
        self._pending.clear()
        self.current_id = None
        self.state = state
        self._pipeline.batches.discard(self.id)

    def _ensure_active(self) -> None:
        if not self.active:
            raise ValidationError(f"Batch is {self.state}", batch_id=str(self.id))

    def _offered(self, template_id: UUID) -> FeedbackTemplate:
        for template in self.templates:
            if template.id == template_id:
                return template
        raise ValidationError(
            f"Template is not available to {self.action} candidates",
            template_id=str(template_id),
        )

    def _skip(self, candidate_id: UUID) -> SubmitResult:
        logger.warning("batch_candidate_missing", batch_id=str(self.id), candidate_id=str(candidate_id))
        self.skipped.append(candidate_id)
        return self._advance(None)

    def _advance(self, processed_id: UUID | None) -> SubmitResult:
        if self._pending:
            self.current_id = self._pending.popleft()
            return SubmitResult(
                done=False,
                remaining_count=self.remaining_count,
                processed_id=processed_id,
                current_id=self.current_id,
            )

        self.current_id = None
        self.state = "completed"
        self._pipeline.batches.discard(self.id)
        logger.info(
            "batch_completed",
            batch_id=str(self.id),
            action=self.action,
            total=self.total,
            processed=len(self.processed),
            skipped=len(self.skipped),
        )
        return SubmitResult(
            done=True,
            remaining_count=0,
            processed_id=processed_id,
            current_id=None,
            summary=self.summary(),
        )


class BatchRegistry:
    """Batches in progress, by id. Batches left idle too long are expired."""

    def __init__(self, idle_timeout: float = 1800):
        self.idle_timeout = timedelta(seconds=idle_timeout)
        self._batches: dict[UUID, BatchHandle] = {}

    def register(self, handle: BatchHandle) -> None:
        self.expire_idle()
        self._batches[handle.id] = handle

    def get(self, batch_id: UUID) -> BatchHandle:
        self.expire_idle()
        handle = self._batches.get(batch_id)
        if handle is None:
            raise NotFoundError("Batch not found", batch_id=str(batch_id))
        return handle

    def discard(self, batch_id: UUID) -> None:
        self._batches.pop(batch_id, None)

    def expire_idle(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        stale = [
            h
            for h in self._batches.values()
            if not h.sending and now - h.last_activity_at > self.idle_timeout
        ]
        for handle in stale:
            handle.expire()
        return len(stale)

    def __len__(self) -> int:
        return len(self._batches)
