from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

Stage = Literal["applied", "cv_review", "ready_for_interview"]
Status = Literal["qualified", "not_qualified"]
View = Literal["new", "in_review", "approved", "rejected", "archived"]
ReadyFor = Literal["onsite", "hybrid", "remote", "flexible", "all"]


class ApplicationHistoryResponse(BaseModel):
    job_opening_id: UUID | None
    job_title: str
    company_name: str
    applied_at: datetime
    stage: str
    status: str | None
    recorded_at: datetime

    model_config = {"from_attributes": True}


class FeedbackHistoryResponse(BaseModel):
    template_id: UUID | None
    template_title: str
    action: str
    subject: str
    attachment_name: str | None
    sent_by: str
    status: str
    sent_at: datetime

    model_config = {"from_attributes": True}


class CandidateListResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: str
    job_opening_id: UUID | None
    form_title: str | None
    stage: str
    status: str | None
    applied_at: datetime
    archived_at: datetime | None

    model_config = {"from_attributes": True}


class CandidateResponse(CandidateListResponse):
    phone_number: str | None
    skills: list[str]
    experience: str
    ready_for: str | None
    employment_type: str | None
    cv_url: str | None
    notes: str | None
    application_history: list[ApplicationHistoryResponse]
    feedback_history: list[FeedbackHistoryResponse]


class PaginatedCandidates(BaseModel):
    items: list[CandidateListResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CandidateSelection(BaseModel):
    candidate_ids: list[UUID] = Field(..., min_length=1)


class TransferRequest(CandidateSelection):
    target_job_opening_id: UUID
    keep_previous_job_data: bool = True


class TransitionRequest(BaseModel):
    kind: Literal["set_stage", "take_out", "transfer"]
    stage: Stage | None = None
    target_job_opening_id: UUID | None = None
    keep_previous_job_data: bool = True

    def payload(self) -> dict:
        return self.model_dump(exclude={"kind"}, exclude_none=True)


class BulkActionResponse(BaseModel):
    action: str
    total: int
    affected: int


class SendFeedbackRequest(CandidateSelection):
    template_id: UUID
    attachment_name: str | None = None
