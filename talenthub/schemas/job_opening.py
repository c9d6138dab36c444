from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from talenthub.schemas.candidate import CandidateListResponse


class WaveResponse(BaseModel):
    wave_number: int
    opened_at: datetime
    closed_at: datetime | None

    model_config = {"from_attributes": True}


class JobOpeningCreate(BaseModel):
    title: str
    company_name: str = ""
    status: Literal["open", "closed"] = "open"


class JobOpeningResponse(BaseModel):
    id: UUID
    title: str
    company_name: str
    status: str
    due_date: datetime | None
    created_at: datetime
    waves: list[WaveResponse]
    applicant_count: int = 0

    model_config = {"from_attributes": True}


class WaveGroupResponse(BaseModel):
    wave: WaveResponse
    candidate_count: int
    candidates: list[CandidateListResponse]
    page: int
    total_pages: int


class OpenJobOpeningRequest(BaseModel):
    due_date: datetime | None = None


class TransferOption(BaseModel):
    value: UUID
    label: str
