from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from talenthub.core.config import get_settings
from talenthub.core.dependencies import get_openings, get_store
from talenthub.models.job_opening import JobOpening
from talenthub.schemas.candidate import CandidateListResponse, Status
from talenthub.schemas.job_opening import (
    JobOpeningCreate,
    JobOpeningResponse,
    OpenJobOpeningRequest,
    TransferOption,
    WaveGroupResponse,
    WaveResponse,
)
from talenthub.services.candidate_store import CandidateStore
from talenthub.services.filtering import paginate
from talenthub.services.job_openings import JobOpeningStore
from talenthub.services.waves import derive_waves

router = APIRouter(prefix="/job-openings", tags=["job-openings"])
settings = get_settings()


def _build_job_opening_response(opening: JobOpening, applicant_count: int = 0) -> JobOpeningResponse:
    return JobOpeningResponse(
        id=opening.id,
        title=opening.title,
        company_name=opening.company_name,
        status=opening.status,
        due_date=opening.due_date,
        created_at=opening.created_at,
        waves=[WaveResponse.model_validate(w) for w in opening.waves],
        applicant_count=applicant_count,
    )


@router.get("", response_model=list[JobOpeningResponse])
async def list_job_openings(
    status_filter: str | None = Query(None, alias="status"),
    openings: JobOpeningStore = Depends(get_openings),
    store: CandidateStore = Depends(get_store),
):
    candidates = await store.list_all()
    return [
        _build_job_opening_response(
            opening, sum(1 for c in candidates if c.job_opening_id == opening.id)
        )
        for opening in await openings.list_all(status=status_filter)
    ]


@router.post("", response_model=JobOpeningResponse, status_code=status.HTTP_201_CREATED)
async def create_job_opening(
    data: JobOpeningCreate,
    openings: JobOpeningStore = Depends(get_openings),
):
    opening = await openings.add(
        JobOpening(title=data.title, company_name=data.company_name, status=data.status)
    )
    return _build_job_opening_response(opening)


@router.get("/transfer-options", response_model=list[TransferOption])
async def transfer_options(
    candidate_ids: list[UUID] = Query([]),
    openings: JobOpeningStore = Depends(get_openings),
    store: CandidateStore = Depends(get_store),
):
    """Open job openings the selected candidates can be transferred to."""
    current_ids = set()
    for candidate_id in candidate_ids:
        candidate = await store.find(candidate_id)
        if candidate is not None and candidate.job_opening_id is not None:
            current_ids.add(candidate.job_opening_id)
    return [
        TransferOption(value=o.id, label=f"{o.company_name} - {o.title}")
        for o in await openings.transfer_targets(current_ids)
    ]


@router.get("/{job_opening_id}", response_model=JobOpeningResponse)
async def get_job_opening(
    job_opening_id: UUID,
    openings: JobOpeningStore = Depends(get_openings),
    store: CandidateStore = Depends(get_store),
):
    opening = await openings.get(job_opening_id)
    return _build_job_opening_response(opening, len(await store.list_all(job_opening_id=opening.id)))


@router.get("/{job_opening_id}/waves", response_model=list[WaveGroupResponse])
async def list_waves(
    job_opening_id: UUID,
    search: str | None = None,
    status_filter: Status | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.WAVE_PAGE_SIZE, ge=1, le=100),
    openings: JobOpeningStore = Depends(get_openings),
    store: CandidateStore = Depends(get_store),
):
    """Applicants grouped by wave; recomputed on every call since the open wave ends now."""
    opening = await openings.get(job_opening_id)
    candidates = sorted(
        await store.list_all(job_opening_id=opening.id), key=lambda c: c.applied_at
    )
    groups = derive_waves(opening, candidates, search=search, status=status_filter)

    responses = []
    for group in groups:
        result = paginate(group.candidates, page, page_size)
        responses.append(
            WaveGroupResponse(
                wave=WaveResponse.model_validate(group.wave),
                candidate_count=result.total,
                candidates=[CandidateListResponse.model_validate(c) for c in result.items],
                page=result.page,
                total_pages=result.total_pages,
            )
        )
    return responses


@router.post("/{job_opening_id}/open", response_model=JobOpeningResponse)
async def open_job_opening(
    job_opening_id: UUID,
    data: OpenJobOpeningRequest,
    openings: JobOpeningStore = Depends(get_openings),
    store: CandidateStore = Depends(get_store),
):
    opening = await openings.reopen(job_opening_id, due_date=data.due_date)
    return _build_job_opening_response(opening, len(await store.list_all(job_opening_id=opening.id)))


@router.post("/{job_opening_id}/close", response_model=JobOpeningResponse)
async def close_job_opening(
    job_opening_id: UUID,
    openings: JobOpeningStore = Depends(get_openings),
    store: CandidateStore = Depends(get_store),
):
    opening = await openings.close(job_opening_id)
    return _build_job_opening_response(opening, len(await store.list_all(job_opening_id=opening.id)))
