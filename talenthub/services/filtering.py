import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from talenthub.models.candidate import Candidate

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0


def in_view(candidate: Candidate, view: str) -> bool:
    if view == "archived":
        return candidate.is_archived
    if candidate.is_archived:
        return False
    if view == "approved":
        return candidate.status == "qualified"
    if view == "rejected":
        return candidate.status == "not_qualified"
    return True


def matches_search(candidate: Candidate, search: str) -> bool:
    # Blank input disables the search; otherwise the text is matched as typed.
    if not search.strip():
        return True
    query = search.lower()
    fields = (candidate.name, candidate.role or "", candidate.form_title or "")
    return any(query in value.lower() for value in fields)


def filter_candidates(
    candidates: Iterable[Candidate],
    view: str = "new",
    search: str | None = None,
    stage: str | None = None,
    status: str | None = None,
    ready_for: str | None = None,
) -> list[Candidate]:
    result = [c for c in candidates if in_view(c, view)]
    if stage and stage != "all":
        result = [c for c in result if c.stage == stage]
    if status and status != "all":
        result = [c for c in result if c.status == status]
    if ready_for and ready_for != "all":
        result = [c for c in result if c.ready_for == ready_for]
    if search:
        result = [c for c in result if matches_search(c, search)]
    return result


def paginate(items: Sequence[T], page: int = 1, page_size: int = 10) -> Page[T]:
    start = (page - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        total=len(items),
        page=page,
        page_size=page_size,
    )
