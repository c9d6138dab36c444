from uuid import UUID

from fastapi import APIRouter, Depends, status

from talenthub.core.dependencies import get_batches, get_pipeline
from talenthub.schemas.candidate import CandidateListResponse
from talenthub.schemas.feedback import (
    BatchCreate,
    BatchResponse,
    FeedbackDraftResponse,
    FeedbackSubmit,
    FeedbackTemplateResponse,
    SubmitResponse,
)
from talenthub.services.bulk_actions import BatchHandle, BatchRegistry
from talenthub.services.feedback import FeedbackSubmission
from talenthub.services.pipeline import CandidatePipeline

router = APIRouter(prefix="/batches", tags=["batches"])


async def _current_candidate(
    pipeline: CandidatePipeline, handle: BatchHandle
) -> CandidateListResponse | None:
    if handle.current_id is None:
        return None
    candidate = await pipeline.store.find(handle.current_id)
    return CandidateListResponse.model_validate(candidate) if candidate else None


async def _build_batch_response(pipeline: CandidatePipeline, handle: BatchHandle) -> BatchResponse:
    return BatchResponse(
        id=handle.id,
        action=handle.action,
        context=handle.context,
        state=handle.state,
        total=handle.total,
        remaining_count=handle.remaining_count,
        current_candidate=await _current_candidate(pipeline, handle),
        templates=[FeedbackTemplateResponse.model_validate(t) for t in handle.templates],
    )


@router.post("", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def begin_batch(data: BatchCreate, pipeline: CandidatePipeline = Depends(get_pipeline)):
    handle = await pipeline.begin_bulk_action(data.candidate_ids, data.action, data.context)
    return await _build_batch_response(pipeline, handle)


@router.get("/{batch_id}", response_model=BatchResponse)
async def get_batch(
    batch_id: UUID,
    batches: BatchRegistry = Depends(get_batches),
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    return await _build_batch_response(pipeline, batches.get(batch_id))


@router.get("/{batch_id}/draft", response_model=FeedbackDraftResponse)
async def get_draft(
    batch_id: UUID,
    template_id: UUID,
    batches: BatchRegistry = Depends(get_batches),
):
    """Subject and content rendered for the candidate currently presented."""
    draft = await batches.get(batch_id).draft(template_id)
    return FeedbackDraftResponse(
        template_id=draft.template_id, subject=draft.subject, content=draft.content
    )


@router.post("/{batch_id}/submit", response_model=SubmitResponse)
async def submit_feedback(
    batch_id: UUID,
    data: FeedbackSubmit,
    batches: BatchRegistry = Depends(get_batches),
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    handle = batches.get(batch_id)
    result = await handle.submit(
        FeedbackSubmission(
            template_id=data.template_id,
            content=data.content,
            subject=data.subject,
            attachment_name=data.attachment_name,
        )
    )
    return SubmitResponse(
        done=result.done,
        remaining_count=result.remaining_count,
        processed_id=result.processed_id,
        current_candidate=await _current_candidate(pipeline, handle),
        summary=result.summary,
    )


@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_batch(batch_id: UUID, batches: BatchRegistry = Depends(get_batches)):
    batches.get(batch_id).cancel()
