from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from talenthub.schemas.candidate import CandidateListResponse


class FeedbackTemplateResponse(BaseModel):
    id: UUID
    title: str
    content: str
    subject: str | None
    type: str
    attachment_url: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BatchCreate(BaseModel):
    candidate_ids: list[UUID] = Field(..., min_length=1)
    action: Literal["approve", "reject"]
    context: Literal["new_candidates", "in_review"] = "new_candidates"


class BatchResponse(BaseModel):
    id: UUID
    action: str
    context: str
    state: str
    total: int
    remaining_count: int
    current_candidate: CandidateListResponse | None
    templates: list[FeedbackTemplateResponse]


class FeedbackDraftResponse(BaseModel):
    template_id: UUID
    subject: str
    content: str


class FeedbackSubmit(BaseModel):
    template_id: UUID
    content: str
    subject: str
    attachment_name: str | None = None


class SubmitResponse(BaseModel):
    done: bool
    remaining_count: int
    processed_id: UUID | None
    current_candidate: CandidateListResponse | None
    summary: str | None = None
