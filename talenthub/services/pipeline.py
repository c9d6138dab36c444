"""Candidate pipeline: stage/status transitions, single and bulk.

``stage`` and ``status`` are orthogonal. Stage changes, take-out and transfer
apply immediately; approve and reject need one feedback submission per
candidate and therefore go through a :class:`BatchHandle`.
"""

from collections.abc import Iterable
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from talenthub.core.database import utcnow
from talenthub.core.errors import NotFoundError, TransientSendError, ValidationError
from talenthub.models.candidate import STAGES, ApplicationHistory, Candidate, FeedbackHistory
from talenthub.models.feedback_template import FeedbackTemplate
from talenthub.models.job_opening import JobOpening
from talenthub.services.bulk_actions import BatchHandle, BatchRegistry
from talenthub.services.candidate_store import CandidateStore
from talenthub.services.feedback import (
    ACTIONS,
    FEEDBACK_ACTION,
    FeedbackSubmission,
    TemplateCatalog,
    build_draft,
    templates_for_action,
)
from talenthub.services.job_openings import JobOpeningStore

logger = structlog.get_logger()

# Rejecting from the in-review list removes the record; from the new-candidates
# list it only marks the candidate not qualified (visible under "rejected").
REJECT_CONTEXTS = ("new_candidates", "in_review")


def _selection(candidate_ids: Iterable[UUID], verb: str) -> list[UUID]:
    ids = list(dict.fromkeys(candidate_ids))
    if not ids:
        raise ValidationError(f"Please select at least one candidate to {verb}")
    return ids


class CandidatePipeline:
    def __init__(
        self,
        store: CandidateStore,
        openings: JobOpeningStore,
        templates: TemplateCatalog,
        sender,
        templates_per_action: int = 3,
        sent_by: str = "Recruitment Team",
        batch_idle_timeout: float = 1800,
    ):
        self.store = store
        self.openings = openings
        self.templates = templates
        self.sender = sender
        self.templates_per_action = templates_per_action
        self.sent_by = sent_by
        self.batches = BatchRegistry(idle_timeout=batch_idle_timeout)

    # --- immediate transitions ---

    async def set_stage(self, candidate_id: UUID, stage: str) -> Candidate | None:
        if stage not in STAGES:
            raise ValidationError(f"Unknown stage '{stage}'", stage=stage)
        try:
            return await self.store.update(candidate_id, stage=stage)
        except NotFoundError:
            logger.warning("set_stage_candidate_missing", candidate_id=str(candidate_id))
            return None

    async def take_out(self, candidate_ids: Iterable[UUID]) -> int:
        ids = _selection(candidate_ids, "take out")
        count = 0
        for candidate_id in ids:
            try:
                await self.store.update(candidate_id, stage="applied")
            except NotFoundError:
                logger.warning("take_out_candidate_missing", candidate_id=str(candidate_id))
                continue
            count += 1
        logger.info("candidates_taken_out", requested=len(ids), count=count)
        return count

    async def transfer(
        self,
        candidate_ids: Iterable[UUID],
        target_opening_id: UUID,
        keep_previous_job_data: bool = True,
    ) -> list[Candidate]:
        """Move every candidate to another job opening, or none of them."""
        ids = _selection(candidate_ids, "transfer")
        try:
            target = await self.openings.get(target_opening_id)
        except NotFoundError:
            raise ValidationError("Selected job opening not found") from None
        if target.status != "open":
            raise ValidationError("Selected job opening is not open")

        already_there = [
            str(c.id) for c in [await self.store.get(i) for i in ids] if c.job_opening_id == target.id
        ]
        if already_there:
            raise ValidationError(
                "Some candidates are already in the selected job opening",
                candidate_ids=already_there,
            )

        async def move(session: AsyncSession, candidate: Candidate) -> None:
            previous = candidate.job_opening
            if keep_previous_job_data and previous is not None:
                candidate.application_history.append(
                    ApplicationHistory(
                        job_opening_id=previous.id,
                        job_title=previous.title,
                        company_name=previous.company_name,
                        applied_at=candidate.applied_at,
                        stage=candidate.stage,
                        status=candidate.status,
                    )
                )
            candidate.job_opening = await session.get(JobOpening, target.id)

        moved = await self.store.apply(ids, move)
        logger.info(
            "candidates_transferred",
            count=len(moved),
            target_job_opening_id=str(target.id),
            keep_previous_job_data=keep_previous_job_data,
        )
        return moved

    async def transition(self, candidate_id: UUID, kind: str, payload: dict | None = None):
        payload = payload or {}
        if kind == "set_stage":
            if "stage" not in payload:
                raise ValidationError("Missing stage")
            return await self.set_stage(candidate_id, payload["stage"])
        if kind == "take_out":
            return await self.take_out([candidate_id])
        if kind == "transfer":
            if "target_job_opening_id" not in payload:
                raise ValidationError("Please select a job opening")
            return await self.transfer(
                [candidate_id],
                payload["target_job_opening_id"],
                keep_previous_job_data=payload.get("keep_previous_job_data", True),
            )
        raise ValidationError(f"Unknown transition '{kind}'", kind=kind)

    async def archive(self, candidate_ids: Iterable[UUID]) -> int:
        ids = _selection(candidate_ids, "archive")
        now = utcnow()
        count = 0
        for candidate_id in ids:
            try:
                await self.store.update(candidate_id, archived_at=now)
            except NotFoundError:
                logger.warning("archive_candidate_missing", candidate_id=str(candidate_id))
                continue
            count += 1
        logger.info("candidates_archived", count=count)
        return count

    async def delete(self, candidate_ids: Iterable[UUID]) -> int:
        ids = _selection(candidate_ids, "delete")
        count = 0
        for candidate_id in ids:
            try:
                await self.store.delete(candidate_id)
            except NotFoundError:
                logger.warning("delete_candidate_missing", candidate_id=str(candidate_id))
                continue
            count += 1
        logger.info("candidates_deleted", count=count)
        return count

    # --- feedback ---

    async def deliver(self, candidate: Candidate, submission: FeedbackSubmission) -> None:
        """Send one feedback message; any failure surfaces as TransientSendError."""
        try:
            await self.sender.send(candidate, submission)
        except TransientSendError:
            logger.warning("feedback_send_failed", candidate_id=str(candidate.id))
            raise
        except Exception as e:
            logger.warning("feedback_send_failed", candidate_id=str(candidate.id), error=str(e))
            raise TransientSendError(
                "Failed to send feedback. Please try again.", candidate_id=str(candidate.id)
            ) from e

    async def _record_feedback(
        self,
        candidate_id: UUID,
        action: str,
        template: FeedbackTemplate,
        submission: FeedbackSubmission,
        status: str | None = None,
    ) -> None:
        async def record(session: AsyncSession, candidate: Candidate) -> None:
            if status is not None:
                candidate.status = status
            candidate.feedback_history.append(
                FeedbackHistory(
                    template_id=template.id,
                    template_title=template.title,
                    action=action,
                    subject=submission.subject,
                    content=submission.content,
                    attachment_name=submission.attachment_name,
                    sent_by=self.sent_by,
                )
            )

        await self.store.apply([candidate_id], record)

    async def send_feedback(
        self,
        candidate_ids: Iterable[UUID],
        template_id: UUID,
        attachment_name: str | None = None,
    ) -> int:
        """Send a template to each selected candidate without deciding on them.

        Messages go out one at a time; a failed send stops the run and the
        candidates already served keep their history entry.
        """
        ids = _selection(candidate_ids, "send feedback")
        try:
            template = await self.templates.get(template_id)
        except NotFoundError:
            raise ValidationError("Please select a template") from None

        count = 0
        for candidate_id in ids:
            candidate = await self.store.find(candidate_id)
            if candidate is None:
                logger.warning("send_feedback_candidate_missing", candidate_id=str(candidate_id))
                continue
            draft = build_draft(template, candidate, FEEDBACK_ACTION)
            submission = FeedbackSubmission(
                template_id=template.id,
                content=draft.content,
                subject=draft.subject,
                attachment_name=attachment_name,
            )
            await self.deliver(candidate, submission)
            try:
                await self._record_feedback(candidate_id, FEEDBACK_ACTION, template, submission)
            except NotFoundError:
                logger.warning("send_feedback_candidate_missing", candidate_id=str(candidate_id))
                continue
            count += 1
        logger.info("feedback_sent_to_candidates", template_id=str(template.id), count=count)
        return count

    # --- feedback-gated transitions ---

    async def offered_templates(self, action: str) -> list[FeedbackTemplate]:
        if action not in ACTIONS:
            raise ValidationError(f"Unknown action '{action}'", action=action)
        return templates_for_action(
            await self.templates.list_all(), action, self.templates_per_action
        )

    async def begin_bulk_action(
        self,
        candidate_ids: Iterable[UUID],
        action: str,
        context: str = "new_candidates",
    ) -> BatchHandle:
        ids = _selection(candidate_ids, action)
        if context not in REJECT_CONTEXTS:
            raise ValidationError(f"Unknown context '{context}'", context=context)
        templates = await self.offered_templates(action)
        if not templates:
            raise ValidationError(f"No feedback templates available to {action} candidates")
        handle = BatchHandle(self, ids, action, context, templates)
        self.batches.register(handle)
        logger.info(
            "batch_started",
            batch_id=str(handle.id),
            action=action,
            context=context,
            total=handle.total,
        )
        return handle

    async def approve(self, candidate_id: UUID) -> BatchHandle:
        return await self.begin_bulk_action([candidate_id], "approve")

    async def reject(self, candidate_id: UUID, context: str = "new_candidates") -> BatchHandle:
        return await self.begin_bulk_action([candidate_id], "reject", context)

    async def approve_many(self, candidate_ids: Iterable[UUID]) -> BatchHandle:
        return await self.begin_bulk_action(candidate_ids, "approve")

    async def reject_many(
        self, candidate_ids: Iterable[UUID], context: str = "new_candidates"
    ) -> BatchHandle:
        return await self.begin_bulk_action(candidate_ids, "reject", context)

    async def commit_decision(
        self,
        candidate_id: UUID,
        action: str,
        template: FeedbackTemplate,
        submission: FeedbackSubmission,
        context: str = "new_candidates",
    ) -> None:
        """Apply the side effect of a sent approve/reject feedback."""
        if action == "reject" and context == "in_review":
            await self.store.delete(candidate_id)
            logger.info("candidate_rejected", candidate_id=str(candidate_id), removed=True)
            return

        status = "qualified" if action == "approve" else "not_qualified"
        await self._record_feedback(candidate_id, action, template, submission, status=status)
        logger.info(
            "candidate_approved" if action == "approve" else "candidate_rejected",
            candidate_id=str(candidate_id),
            status=status,
        )
