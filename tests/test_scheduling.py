import random
from collections import Counter

import pytest

from escola.core.errors import InvalidScheduleRequestError
from escola.services.scheduling import (
    DEFAULT_DAYS,
    DEFAULT_TIME_SLOTS,
    PendingPeriod,
    allocate,
    build_cells,
    day_index,
    expand_pending,
    periods_needed,
)


@pytest.mark.parametrize(
    "workload,expected",
    [(60, 2), (180, 4), (20, 2), (100, 2), (50, 2), (151, 4), (None, 2)],
)
def test_periods_needed(workload, expected):
    assert periods_needed(workload, 50) == expected


def test_periods_capped_by_grid_but_never_below_two():
    assert periods_needed(1000, 50, max_periods=6) == 6
    assert periods_needed(1000, 50, max_periods=1) == 2


def test_periods_with_other_period_length():
    assert periods_needed(180, 45) == 4
    assert periods_needed(200, 40) == 5


def test_cells_are_day_major():
    cells = build_cells(["Segunda", "Quarta"], [("07:00", "07:50"), ("07:50", "08:40")])
    assert [c.key for c in cells] == [
        (0, "07:00", "07:50"),
        (0, "07:50", "08:40"),
        (2, "07:00", "07:50"),
        (2, "07:50", "08:40"),
    ]


def test_cells_reject_empty_input_and_unknown_day():
    with pytest.raises(InvalidScheduleRequestError):
        build_cells([], DEFAULT_TIME_SLOTS)
    with pytest.raises(InvalidScheduleRequestError):
        build_cells(DEFAULT_DAYS, [])
    with pytest.raises(InvalidScheduleRequestError):
        day_index("Monday")


def test_expand_pending_one_item_per_period():
    pending = expand_pending([(1, 10, 100), (2, 20, 50), (3, 30, 180)], cell_count=30)
    counts = Counter((p.teacher_id, p.subject_id) for p in pending)
    assert counts == {(1, 10): 2, (2, 20): 2, (3, 30): 4}


def _assert_no_double_booking(outcome):
    cells = [p.cell.key for p in outcome.placed]
    assert len(cells) == len(set(cells))
    teacher_cells = [(p.period.teacher_id, p.cell.key) for p in outcome.placed]
    assert len(teacher_cells) == len(set(teacher_cells))


def test_two_assignments_on_full_week():
    cells = build_cells(DEFAULT_DAYS, DEFAULT_TIME_SLOTS)
    pending = expand_pending([(1, 10, 100), (2, 20, 50)], cell_count=len(cells))

    outcome = allocate(pending, cells, rng=random.Random(1))

    assert len(outcome.placed) == 4
    assert outcome.unplaced == []
    assert outcome.complete
    _assert_no_double_booking(outcome)


def test_single_cell_places_one_and_reports_the_rest():
    cells = build_cells(["Segunda"], [("07:00", "07:50")])
    pending = expand_pending([(1, 10, 100), (2, 20, 50)], cell_count=len(cells))
    assert len(pending) == 4

    outcome = allocate(pending, cells, rng=random.Random(7))

    assert len(outcome.placed) == 1
    assert len(outcome.unplaced) == 3
    assert outcome.requested == 4
    assert not outcome.complete
    assert outcome.placed[0].cell.key == (0, "07:00", "07:50")


def test_seeded_runs_are_reproducible():
    cells = build_cells(DEFAULT_DAYS, DEFAULT_TIME_SLOTS)
    pending = expand_pending([(1, 10, 200), (2, 20, 150), (3, 30, 100)], cell_count=len(cells))

    a = allocate(pending, cells, rng=random.Random(42))
    b = allocate(pending, cells, rng=random.Random(42))
    assert a.placed == b.placed


def test_allocate_does_not_touch_input():
    cells = build_cells(DEFAULT_DAYS, DEFAULT_TIME_SLOTS)
    pending = expand_pending([(1, 10, 200), (2, 20, 150)], cell_count=len(cells))
    before = list(pending)
    allocate(pending, cells, rng=random.Random(3))
    assert pending == before


def test_teacher_busy_elsewhere_is_respected():
    cells = build_cells(["Segunda"], [("07:00", "07:50"), ("07:50", "08:40")])
    pending = [PendingPeriod(1, 10), PendingPeriod(1, 10)]
    busy = {1: {(0, "07:00", "07:50")}}

    outcome = allocate(pending, cells, rng=random.Random(0), teacher_busy=busy)

    assert [p.cell.key for p in outcome.placed] == [(0, "07:50", "08:40")]
    assert len(outcome.unplaced) == 1
    # o dicionario de entrada nao muda
    assert busy == {1: {(0, "07:00", "07:50")}}


@pytest.mark.parametrize("seed", range(20))
def test_invariants_hold_for_crowded_grids(seed):
    rng = random.Random(seed)
    days = DEFAULT_DAYS[: rng.randint(1, 5)]
    slots = DEFAULT_TIME_SLOTS[: rng.randint(1, 6)]
    cells = build_cells(days, slots)
    assignments = [
        (rng.randint(1, 4), subject, rng.choice([20, 60, 100, 180, 300]))
        for subject in range(rng.randint(1, 8))
    ]
    pending = expand_pending(assignments, cell_count=len(cells))

    outcome = allocate(pending, cells, rng=rng)

    _assert_no_double_booking(outcome)
    assert len(outcome.placed) <= len(pending)
    assert len(outcome.placed) <= len(cells)
    assert outcome.requested == len(pending)
    assert {p.cell.key for p in outcome.placed} <= {c.key for c in cells}
