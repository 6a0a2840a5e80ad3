from __future__ import annotations

from run_gate.gate import select_wait_set


def test_keeps_only_lower_run_numbers(make_run) -> None:
    current = make_run(500, 10, "in_progress")
    candidates = [
        make_run(401, 8),
        make_run(500, 10, "in_progress"),
        make_run(502, 11),
        make_run(399, 9, "in_progress"),
        make_run(503, 12, "in_progress"),
    ]

    wait_set = select_wait_set(current, candidates)

    assert [run.run_number for run in wait_set] == [9, 8]
    assert all(run.run_number < current.run_number for run in wait_set)


def test_equal_run_number_is_excluded(make_run) -> None:
    current = make_run(500, 10)

    assert select_wait_set(current, [make_run(501, 10)]) == ()


def test_gaps_in_numbering_are_tolerated(make_run) -> None:
    current = make_run(500, 40)
    candidates = [make_run(100, 3), make_run(300, 31)]

    assert [run.id for run in select_wait_set(current, candidates)] == [300, 100]


def test_empty_candidates(make_run) -> None:
    assert select_wait_set(make_run(1, 1), []) == ()


def test_selection_is_idempotent(make_run) -> None:
    current = make_run(500, 10)
    candidates = [make_run(2, 2), make_run(7, 7, "in_progress"), make_run(5, 5)]

    first = select_wait_set(current, candidates)
    second = select_wait_set(current, candidates)

    assert first == second
    assert [run.run_number for run in first] == [7, 5, 2]


def test_run_listed_twice_is_waited_on_once(make_run) -> None:
    current = make_run(500, 10)
    candidates = [make_run(7, 7, "queued"), make_run(7, 7, "in_progress")]

    wait_set = select_wait_set(current, candidates)

    assert [run.id for run in wait_set] == [7]
