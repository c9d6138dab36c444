import uuid

import pytest

from talenthub.core.errors import NotFoundError, TransientSendError, ValidationError
from talenthub.models.job_opening import JobOpening


@pytest.mark.asyncio
async def test_set_stage_overwrites_any_stage(pipeline, backend_opening, make_candidate):
    candidate = await make_candidate("Ada Lovelace", backend_opening)

    await pipeline.set_stage(candidate.id, "ready_for_interview")
    assert (await pipeline.store.get(candidate.id)).stage == "ready_for_interview"

    await pipeline.set_stage(candidate.id, "applied")
    assert (await pipeline.store.get(candidate.id)).stage == "applied"


@pytest.mark.asyncio
async def test_set_stage_keeps_status(pipeline, backend_opening, make_candidate):
    candidate = await make_candidate("Ada Lovelace", backend_opening, status="qualified")

    updated = await pipeline.set_stage(candidate.id, "cv_review")

    assert updated.stage == "cv_review"
    assert updated.status == "qualified"


@pytest.mark.asyncio
async def test_set_stage_unknown_stage(pipeline, backend_opening, make_candidate):
    candidate = await make_candidate("Ada Lovelace", backend_opening)

    with pytest.raises(ValidationError):
        await pipeline.set_stage(candidate.id, "hired")


@pytest.mark.asyncio
async def test_set_stage_missing_candidate_is_a_noop(pipeline):
    assert await pipeline.set_stage(uuid.uuid4(), "cv_review") is None


@pytest.mark.asyncio
async def test_take_out_returns_to_applied(pipeline, backend_opening, make_candidate):
    a = await make_candidate("Ada Lovelace", backend_opening, stage="ready_for_interview")
    b = await make_candidate("Grace Hopper", backend_opening, stage="cv_review")

    count = await pipeline.take_out([a.id, b.id, uuid.uuid4()])

    assert count == 2
    assert (await pipeline.store.get(a.id)).stage == "applied"
    assert (await pipeline.store.get(b.id)).stage == "applied"


@pytest.mark.asyncio
async def test_empty_selection_is_refused(pipeline):
    with pytest.raises(ValidationError, match="select at least one candidate"):
        await pipeline.take_out([])
    with pytest.raises(ValidationError):
        await pipeline.archive([])


@pytest.mark.asyncio
async def test_transfer_moves_and_keeps_history(
    pipeline, backend_opening, frontend_opening, make_candidate
):
    candidate = await make_candidate("Ada Lovelace", backend_opening, stage="cv_review")

    moved = await pipeline.transfer([candidate.id], frontend_opening.id)

    assert [c.id for c in moved] == [candidate.id]
    stored = await pipeline.store.get(candidate.id)
    assert stored.job_opening_id == frontend_opening.id
    assert stored.form_title == "Frontend Developer"
    assert len(stored.application_history) == 1
    snapshot = stored.application_history[0]
    assert snapshot.job_title == "Backend Engineer"
    assert snapshot.stage == "cv_review"


@pytest.mark.asyncio
async def test_transfer_without_keeping_history(
    pipeline, backend_opening, frontend_opening, make_candidate
):
    candidate = await make_candidate("Ada Lovelace", backend_opening)

    await pipeline.transfer([candidate.id], frontend_opening.id, keep_previous_job_data=False)

    stored = await pipeline.store.get(candidate.id)
    assert stored.form_title == "Frontend Developer"
    assert stored.application_history == []


@pytest.mark.asyncio
async def test_transfer_is_all_or_nothing(
    pipeline, backend_opening, frontend_opening, make_candidate
):
    c1 = await make_candidate("Ada Lovelace", backend_opening)
    c2 = await make_candidate("Grace Hopper", frontend_opening)

    with pytest.raises(ValidationError) as exc:
        await pipeline.transfer([c1.id, c2.id], frontend_opening.id)

    assert exc.value.context["candidate_ids"] == [str(c2.id)]
    assert (await pipeline.store.get(c1.id)).job_opening_id == backend_opening.id
    assert (await pipeline.store.get(c2.id)).job_opening_id == frontend_opening.id


@pytest.mark.asyncio
async def test_transfer_to_same_title_at_another_company(
    pipeline, backend_opening, make_candidate
):
    candidate = await make_candidate("Ada Lovelace", backend_opening)
    other = await pipeline.openings.add(
        JobOpening(title="Backend Engineer", company_name="DataWorks", status="open")
    )

    targets = await pipeline.openings.transfer_targets([backend_opening.id])
    assert other.id in [o.id for o in targets]

    await pipeline.transfer([candidate.id], other.id)
    assert (await pipeline.store.get(candidate.id)).job_opening_id == other.id


@pytest.mark.asyncio
async def test_transfer_to_unknown_or_closed_opening(pipeline, backend_opening, make_candidate):
    candidate = await make_candidate("Ada Lovelace", backend_opening)
    closed = await pipeline.openings.add(JobOpening(title="Data Analyst", status="closed"))

    with pytest.raises(ValidationError, match="not found"):
        await pipeline.transfer([candidate.id], uuid.uuid4())
    with pytest.raises(ValidationError, match="not open"):
        await pipeline.transfer([candidate.id], closed.id)
    assert (await pipeline.store.get(candidate.id)).job_opening_id == backend_opening.id


@pytest.mark.asyncio
async def test_transfer_with_stale_id_changes_nothing(
    pipeline, backend_opening, frontend_opening, make_candidate
):
    candidate = await make_candidate("Ada Lovelace", backend_opening)

    with pytest.raises(NotFoundError):
        await pipeline.transfer([candidate.id, uuid.uuid4()], frontend_opening.id)

    assert (await pipeline.store.get(candidate.id)).job_opening_id == backend_opening.id


@pytest.mark.asyncio
async def test_transition_dispatch(pipeline, backend_opening, frontend_opening, make_candidate):
    candidate = await make_candidate("Ada Lovelace", backend_opening)

    await pipeline.transition(candidate.id, "set_stage", {"stage": "cv_review"})
    assert (await pipeline.store.get(candidate.id)).stage == "cv_review"

    await pipeline.transition(candidate.id, "take_out")
    assert (await pipeline.store.get(candidate.id)).stage == "applied"

    await pipeline.transition(
        candidate.id, "transfer", {"target_job_opening_id": frontend_opening.id}
    )
    assert (await pipeline.store.get(candidate.id)).job_opening_id == frontend_opening.id

    with pytest.raises(ValidationError):
        await pipeline.transition(candidate.id, "promote")
    with pytest.raises(ValidationError):
        await pipeline.transition(candidate.id, "set_stage", {})


@pytest.mark.asyncio
async def test_archive_and_delete(pipeline, backend_opening, make_candidate):
    a = await make_candidate("Ada Lovelace", backend_opening)
    b = await make_candidate("Grace Hopper", backend_opening)

    assert await pipeline.archive([a.id]) == 1
    assert (await pipeline.store.get(a.id)).is_archived

    assert await pipeline.delete([b.id, uuid.uuid4()]) == 1
    assert await pipeline.store.find(b.id) is None
    assert [c.id for c in await pipeline.store.list_all()] == [a.id]


@pytest.mark.asyncio
async def test_offered_templates_are_capped_and_typed(pipeline, templates):
    rejection = await pipeline.offered_templates("reject")
    acceptance = await pipeline.offered_templates("approve")

    assert [t.title for t in rejection] == [
        "Rejection - General",
        "Rejection - Overqualified",
        "Rejection - Not Selected",
    ]
    assert [t.title for t in acceptance] == ["Acceptance - General", "Acceptance - Offer"]
    with pytest.raises(ValidationError):
        await pipeline.offered_templates("interview")


@pytest.mark.asyncio
async def test_send_feedback_keeps_stage_and_status(
    pipeline, backend_opening, templates, make_candidate
):
    a = await make_candidate("Ada Lovelace", backend_opening, stage="cv_review")
    b = await make_candidate("Grace Hopper", backend_opening, status="qualified")
    template = templates["Interview Invitation"]

    count = await pipeline.send_feedback(
        [a.id, b.id, uuid.uuid4()], template.id, attachment_name="schedule.pdf"
    )

    assert count == 2
    ada = await pipeline.store.get(a.id)
    grace = await pipeline.store.get(b.id)
    assert (ada.stage, ada.status) == ("cv_review", None)
    assert (grace.stage, grace.status) == ("applied", "qualified")
    entry = ada.feedback_history[0]
    assert entry.action == "feedback"
    assert entry.template_title == "Interview Invitation"
    assert entry.subject == "Re: Application for Backend Engineer"
    assert entry.content == "Dear Ada Lovelace, let's talk."
    assert entry.attachment_name == "schedule.pdf"
    assert len(grace.feedback_history) == 1


@pytest.mark.asyncio
async def test_send_feedback_needs_template_and_selection(
    pipeline, backend_opening, templates, make_candidate
):
    candidate = await make_candidate("Ada Lovelace", backend_opening)

    with pytest.raises(ValidationError, match="select a template"):
        await pipeline.send_feedback([candidate.id], uuid.uuid4())
    with pytest.raises(ValidationError, match="select at least one candidate"):
        await pipeline.send_feedback([], templates["Interview Invitation"].id)
    assert (await pipeline.store.get(candidate.id)).feedback_history == []


class BrokenSender:
    async def send(self, candidate, submission):
        raise ConnectionError("mail API unreachable")


@pytest.mark.asyncio
async def test_send_feedback_failure_records_nothing(
    pipeline, backend_opening, templates, make_candidate
):
    candidate = await make_candidate("Ada Lovelace", backend_opening)
    pipeline.sender = BrokenSender()

    with pytest.raises(TransientSendError):
        await pipeline.send_feedback([candidate.id], templates["Interview Invitation"].id)

    assert (await pipeline.store.get(candidate.id)).feedback_history == []
