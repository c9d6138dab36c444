from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from talenthub.core.config import get_settings
from talenthub.core.dependencies import get_pipeline, get_store
from talenthub.schemas.candidate import (
    BulkActionResponse,
    CandidateListResponse,
    CandidateResponse,
    CandidateSelection,
    PaginatedCandidates,
    ReadyFor,
    SendFeedbackRequest,
    Stage,
    Status,
    TransferRequest,
    TransitionRequest,
    View,
)
from talenthub.services.candidate_store import CandidateStore
from talenthub.services.filtering import filter_candidates, paginate
from talenthub.services.pipeline import CandidatePipeline

router = APIRouter(prefix="/candidates", tags=["candidates"])
settings = get_settings()


@router.get("", response_model=PaginatedCandidates)
async def list_candidates(
    view: View = "new",
    search: str | None = Query(None, description="Search in name, role and job opening"),
    stage: Stage | None = None,
    status_filter: Status | None = Query(None, alias="status"),
    ready_for: ReadyFor | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    store: CandidateStore = Depends(get_store),
):
    candidates = filter_candidates(
        await store.list_all(),
        view=view,
        search=search,
        stage=stage,
        status=status_filter,
        ready_for=ready_for,
    )
    result = paginate(candidates, page, page_size)
    return PaginatedCandidates(
        items=[CandidateListResponse.model_validate(c) for c in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.post("/take-out", response_model=BulkActionResponse)
async def take_out_candidates(
    data: CandidateSelection,
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    count = await pipeline.take_out(data.candidate_ids)
    return BulkActionResponse(action="take_out", total=len(data.candidate_ids), affected=count)


@router.post("/transfer", response_model=list[CandidateListResponse])
async def transfer_candidates(
    data: TransferRequest,
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    moved = await pipeline.transfer(
        data.candidate_ids,
        data.target_job_opening_id,
        keep_previous_job_data=data.keep_previous_job_data,
    )
    return [CandidateListResponse.model_validate(c) for c in moved]


@router.post("/archive", response_model=BulkActionResponse)
async def archive_candidates(
    data: CandidateSelection,
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    count = await pipeline.archive(data.candidate_ids)
    return BulkActionResponse(action="archive", total=len(data.candidate_ids), affected=count)


@router.post("/delete", response_model=BulkActionResponse)
async def delete_candidates(
    data: CandidateSelection,
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    count = await pipeline.delete(data.candidate_ids)
    return BulkActionResponse(action="delete", total=len(data.candidate_ids), affected=count)


@router.post("/send-feedback", response_model=BulkActionResponse)
async def send_feedback(
    data: SendFeedbackRequest,
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    """Send a feedback template to the selected candidates; stage and status are untouched."""
    count = await pipeline.send_feedback(
        data.candidate_ids, data.template_id, attachment_name=data.attachment_name
    )
    return BulkActionResponse(action="send_feedback", total=len(data.candidate_ids), affected=count)


@router.get("/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(candidate_id: UUID, store: CandidateStore = Depends(get_store)):
    return CandidateResponse.model_validate(await store.get(candidate_id))


@router.post("/{candidate_id}/transitions", status_code=status.HTTP_204_NO_CONTENT)
async def transition_candidate(
    candidate_id: UUID,
    data: TransitionRequest,
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    """Stage change, take-out or transfer of a single candidate.

    Unknown candidate ids are ignored for stage changes and take-out.
    """
    await pipeline.transition(candidate_id, data.kind, data.payload())
