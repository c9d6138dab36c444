"""Partition a job opening's applicants into recruiting waves.

A wave covers the half-open interval ``[opened_at, end)`` where ``end`` is the
wave's own ``closed_at``, else the next wave's ``opened_at``, else the moment
of the query. Because the last open wave ends at "now", results are only valid
for the instant they were computed and must be re-derived on every read.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from talenthub.core.database import utcnow
from talenthub.models.candidate import Candidate
from talenthub.models.job_opening import JobOpening, Wave


@dataclass
class WaveGroup:
    wave: Wave
    candidates: list[Candidate] = field(default_factory=list)


def implicit_wave(opening: JobOpening, now: datetime) -> Wave:
    """The single wave assumed for an opening that has no recorded history."""
    return Wave(
        wave_number=1,
        opened_at=opening.created_at,
        closed_at=now if opening.status == "closed" else None,
    )


def wave_end(waves: list[Wave], index: int, now: datetime) -> datetime:
    wave = waves[index]
    if wave.closed_at is not None:
        return wave.closed_at
    if index < len(waves) - 1:
        return waves[index + 1].opened_at
    return now


def _matches(candidate: Candidate, search: str | None, status: str | None) -> bool:
    if search and search.strip():
        if search.lower() not in candidate.name.lower():
            return False
    if status and status != "all":
        if candidate.status != status:
            return False
    return True


def derive_waves(
    opening: JobOpening,
    candidates: Iterable[Candidate],
    search: str | None = None,
    status: str | None = None,
    now: datetime | None = None,
) -> list[WaveGroup]:
    now = now or utcnow()
    applicants = [c for c in candidates if c.job_opening_id == opening.id]

    if not opening.waves:
        members = [c for c in applicants if _matches(c, search, status)]
        return [WaveGroup(wave=implicit_wave(opening, now), candidates=members)]

    waves = list(opening.waves)
    groups = []
    for index, wave in enumerate(waves):
        end = wave_end(waves, index, now)
        # Out-of-order waves give an empty interval; accepted as is.
        members = [
            c
            for c in applicants
            if wave.opened_at <= c.applied_at < end and _matches(c, search, status)
        ]
        groups.append(WaveGroup(wave=wave, candidates=members))
    return groups
