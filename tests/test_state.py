import itertools

import pytest

from contracts.models import Contract, Milestone
from contracts.state import (
    MILESTONE_TRANSITIONS,
    all_paid,
    can_transition,
    check_milestone_transition,
    compute_progress,
    derive_status,
)
from jobboard_core.exceptions import InvalidTransition

S = Milestone.Status
C = Contract.Status

ALLOWED_EDGES = {
    (S.PENDING, S.FUNDED),
    (S.FUNDED, S.SUBMITTED),
    (S.SUBMITTED, S.APPROVED),
    (S.APPROVED, S.PAID),
    (S.SUBMITTED, S.REJECTED),
    (S.REJECTED, S.PENDING),
}


def test_transition_table_matches_lifecycle():
    edges = {(src, dst) for src, targets in MILESTONE_TRANSITIONS.items() for dst in targets}
    assert edges == ALLOWED_EDGES


@pytest.mark.parametrize('src,dst', list(itertools.product(S.values, S.values)))
def test_only_lifecycle_edges_are_reachable(src, dst):
    assert can_transition(src, dst) == ((src, dst) in ALLOWED_EDGES)


def test_paid_is_terminal():
    for target in S.values:
        with pytest.raises(InvalidTransition):
            check_milestone_transition(S.PAID, target)


def test_rejected_returns_to_pending_only():
    check_milestone_transition(S.REJECTED, S.PENDING)
    with pytest.raises(InvalidTransition):
        check_milestone_transition(S.REJECTED, S.FUNDED)


@pytest.mark.parametrize('statuses,expected', [
    ([], 0),
    ([S.PENDING, S.PENDING], 0),
    ([S.PAID, S.PENDING], 50),
    ([S.APPROVED, S.FUNDED, S.SUBMITTED], 33),
    ([S.PAID, S.PAID, S.PENDING], 67),
    ([S.PAID] + [S.PENDING] * 7, 13),
    ([S.PAID, S.APPROVED], 100),
])
def test_compute_progress(statuses, expected):
    assert compute_progress(statuses) == expected


def test_all_paid_requires_at_least_one_milestone():
    assert not all_paid([])
    assert all_paid([S.PAID, S.PAID])
    assert not all_paid([S.PAID, S.APPROVED])


@pytest.mark.parametrize('statuses,dispute_open,cancelled,expected', [
    ([S.PAID, S.PENDING], False, False, C.ACTIVE),
    ([S.PAID, S.PAID], False, False, C.COMPLETED),
    ([], False, False, C.ACTIVE),
    ([S.PAID, S.PENDING], True, False, C.DISPUTED),
    ([S.PAID, S.PAID], True, False, C.DISPUTED),
    ([S.FUNDED], False, True, C.CANCELLED),
])
def test_derive_status(statuses, dispute_open, cancelled, expected):
    assert derive_status(statuses, dispute_open=dispute_open, cancelled=cancelled) == expected


def test_closing_a_dispute_never_derives_disputed():
    for statuses in ([S.PAID, S.PENDING], [S.PAID, S.PAID], [S.SUBMITTED]):
        assert derive_status(statuses, dispute_open=False) in (C.ACTIVE, C.COMPLETED)
