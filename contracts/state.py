"""
Pure contract/milestone state rules. No database access, so every rule can
be unit tested on plain lists of statuses.
"""
from jobboard_core.exceptions import InvalidTransition
from .models import Contract, Milestone

MilestoneStatus = Milestone.Status
ContractStatus = Contract.Status

MILESTONE_TRANSITIONS = {
    MilestoneStatus.PENDING: {MilestoneStatus.FUNDED},
    MilestoneStatus.FUNDED: {MilestoneStatus.SUBMITTED},
    MilestoneStatus.SUBMITTED: {MilestoneStatus.APPROVED, MilestoneStatus.REJECTED},
    MilestoneStatus.APPROVED: {MilestoneStatus.PAID},
    MilestoneStatus.REJECTED: {MilestoneStatus.PENDING},
    MilestoneStatus.PAID: set(),
}

COMPLETED_MILESTONE_STATUSES = {MilestoneStatus.APPROVED, MilestoneStatus.PAID}

# Statuses whose amount currently sits in the client's escrow.
ESCROWED_MILESTONE_STATUSES = {MilestoneStatus.FUNDED, MilestoneStatus.SUBMITTED}

TERMINAL_CONTRACT_STATUSES = {ContractStatus.COMPLETED, ContractStatus.CANCELLED}


def can_transition(current, target):
    return target in MILESTONE_TRANSITIONS.get(current, set())


def check_milestone_transition(current, target):
    if not can_transition(current, target):
        raise InvalidTransition(f"Milestone cannot move from {current} to {target}.")


def compute_progress(statuses):
    """
    Percentage of milestones approved or paid, rounded half up.
    """
    statuses = list(statuses)
    total = len(statuses)
    if not total:
        return 0
    done = sum(1 for s in statuses if s in COMPLETED_MILESTONE_STATUSES)
    return (done * 100 * 2 + total) // (total * 2)


def all_paid(statuses):
    statuses = list(statuses)
    return bool(statuses) and all(s == MilestoneStatus.PAID for s in statuses)


def derive_status(statuses, dispute_open=False, cancelled=False):
    """
    Contract status as a function of its milestones and dispute state.
    """
    if cancelled:
        return ContractStatus.CANCELLED
    if dispute_open:
        return ContractStatus.DISPUTED
    if all_paid(statuses):
        return ContractStatus.COMPLETED
    return ContractStatus.ACTIVE
