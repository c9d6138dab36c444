import uuid
from datetime import datetime, timezone

from talenthub.models.candidate import Candidate
from talenthub.models.job_opening import JobOpening, Wave
from talenthub.services.waves import derive_waves, wave_end

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_opening(waves=None, status="open", title="Backend Engineer"):
    return JobOpening(
        id=uuid.uuid4(),
        title=title,
        company_name="TechCorp",
        status=status,
        created_at=utc(2024, 1, 1),
        waves=waves or [],
    )


def make_candidate(name, opening, applied_at, status=None):
    return Candidate(
        id=uuid.uuid4(),
        name=name,
        job_opening_id=opening.id,
        applied_at=applied_at,
        status=status,
    )


def two_wave_opening():
    return make_opening(
        waves=[
            Wave(wave_number=1, opened_at=utc(2024, 1, 1), closed_at=utc(2024, 1, 15)),
            Wave(wave_number=2, opened_at=utc(2024, 1, 15)),
        ]
    )


def names(group):
    return [c.name for c in group.candidates]


def test_candidates_land_in_their_wave():
    opening = two_wave_opening()
    early = make_candidate("Early Bird", opening, utc(2024, 1, 10))
    late = make_candidate("Late Comer", opening, utc(2024, 1, 20))

    groups = derive_waves(opening, [late, early], now=NOW)

    assert [g.wave.wave_number for g in groups] == [1, 2]
    assert names(groups[0]) == ["Early Bird"]
    assert names(groups[1]) == ["Late Comer"]


def test_applied_at_next_wave_open_goes_to_next_wave():
    opening = make_opening(
        waves=[
            Wave(wave_number=1, opened_at=utc(2024, 1, 1)),
            Wave(wave_number=2, opened_at=utc(2024, 1, 15)),
        ]
    )
    boundary = make_candidate("On Boundary", opening, utc(2024, 1, 15))

    groups = derive_waves(opening, [boundary], now=NOW)

    assert groups[0].candidates == []
    assert names(groups[1]) == ["On Boundary"]


def test_open_wave_ends_now():
    opening = two_wave_opening()
    future = make_candidate("Time Traveller", opening, utc(2024, 4, 1))

    groups = derive_waves(opening, [future], now=NOW)

    assert all(g.candidates == [] for g in groups)
    assert wave_end(list(opening.waves), 1, NOW) == NOW


def test_no_waves_gives_single_implicit_wave_with_everyone():
    opening = make_opening()
    candidates = [
        make_candidate("Before Creation", opening, utc(2023, 6, 1)),
        make_candidate("After", opening, utc(2024, 2, 1)),
    ]

    groups = derive_waves(opening, candidates, now=NOW)

    assert len(groups) == 1
    assert groups[0].wave.wave_number == 1
    assert groups[0].wave.opened_at == opening.created_at
    assert groups[0].wave.closed_at is None
    assert sorted(names(groups[0])) == ["After", "Before Creation"]


def test_implicit_wave_of_closed_opening_closes_now():
    opening = make_opening(status="closed")

    groups = derive_waves(opening, [], now=NOW)

    assert groups[0].wave.closed_at == NOW
    assert groups[0].candidates == []


def test_only_applicants_of_the_opening_are_grouped():
    opening = two_wave_opening()
    other = make_opening(title="Data Analyst")
    mine = make_candidate("Mine", opening, utc(2024, 1, 5))
    theirs = make_candidate("Theirs", other, utc(2024, 1, 5))

    groups = derive_waves(opening, [mine, theirs], now=NOW)

    assert names(groups[0]) == ["Mine"]
    assert groups[1].candidates == []


def test_every_applicant_appears_exactly_once():
    opening = two_wave_opening()
    candidates = [
        make_candidate(f"Candidate {day}", opening, utc(2024, 1, day)) for day in range(1, 29)
    ]

    groups = derive_waves(opening, candidates, now=NOW)

    grouped = [c.id for g in groups for c in g.candidates]
    assert len(grouped) == len(set(grouped)) == len(candidates)


def test_filters_apply_per_group_and_keep_empty_groups():
    opening = two_wave_opening()
    candidates = [
        make_candidate("Alice Martin", opening, utc(2024, 1, 3), status="qualified"),
        make_candidate("Bob Stone", opening, utc(2024, 1, 4)),
        make_candidate("Alicia Keys", opening, utc(2024, 1, 20)),
    ]

    by_search = derive_waves(opening, candidates, search="ALI", now=NOW)
    assert names(by_search[0]) == ["Alice Martin"]
    assert names(by_search[1]) == ["Alicia Keys"]

    by_full_name = derive_waves(opening, candidates, search="alice martin", now=NOW)
    assert names(by_full_name[0]) == ["Alice Martin"]
    assert by_full_name[1].candidates == []

    padded = derive_waves(opening, candidates, search=" ali", now=NOW)
    assert all(g.candidates == [] for g in padded)

    blank = derive_waves(opening, candidates, search="   ", now=NOW)
    assert sum(len(g.candidates) for g in blank) == 3

    by_status = derive_waves(opening, candidates, status="qualified", now=NOW)
    assert len(by_status) == 2
    assert names(by_status[0]) == ["Alice Martin"]
    assert by_status[1].candidates == []

    everyone = derive_waves(opening, candidates, status="all", now=NOW)
    assert sum(len(g.candidates) for g in everyone) == 3


def test_out_of_order_waves_yield_empty_group():
    opening = make_opening(
        waves=[
            Wave(wave_number=1, opened_at=utc(2024, 2, 1)),
            Wave(wave_number=2, opened_at=utc(2024, 1, 15)),
        ]
    )
    candidate = make_candidate("Jan Applicant", opening, utc(2024, 1, 20))

    groups = derive_waves(opening, [candidate], now=NOW)

    assert groups[0].candidates == []
    assert names(groups[1]) == ["Jan Applicant"]
