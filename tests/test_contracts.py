from decimal import Decimal

import pytest

from contracts.models import Contract, Milestone
from contracts.services import ContractService, MilestoneLedger
from finance.models import Transaction, Wallet
from jobboard_core.exceptions import Conflict, ContractLocked, Forbidden, InvalidTransition, NotFound
from notifications.models import Notification
from projects.models import Project, Proposal
from projects.services import ProposalService

pytestmark = pytest.mark.django_db


def test_contract_created_from_accepted_proposal(contract, client_user, freelancer, accepted_proposal):
    assert contract.client == client_user
    assert contract.freelancer == freelancer
    assert contract.total_amount == Decimal('1000.00')
    assert contract.status == Contract.Status.ACTIVE
    assert contract.progress == 0
    assert list(contract.milestones.values_list('title', 'position')) == [('Design', 0), ('Build', 1)]
    assert Notification.objects.filter(
        recipient=freelancer, type=Notification.Type.CONTRACT_CREATED
    ).exists()


def test_default_single_milestone(accepted_proposal, client_user):
    contract = ContractService.create_from_proposal(accepted_proposal.id, client_user)
    milestone = contract.milestones.get()
    assert milestone.title == 'Project delivery'
    assert milestone.amount == Decimal('1000.00')


def test_only_project_owner_creates_contract(accepted_proposal, freelancer):
    with pytest.raises(Forbidden):
        ContractService.create_from_proposal(accepted_proposal.id, freelancer)


def test_pending_proposal_cannot_become_contract(project, freelancer, client_user):
    proposal = ProposalService.submit(
        project.id, freelancer,
        cover_letter='Ready to start',
        bid_amount=Decimal('900.00'),
        estimated_duration=Proposal.Duration.LESS_THAN_1_WEEK,
    )
    with pytest.raises(InvalidTransition):
        ContractService.create_from_proposal(proposal.id, client_user)


def test_second_contract_for_proposal_conflicts(contract, accepted_proposal, client_user):
    with pytest.raises(Conflict):
        ContractService.create_from_proposal(accepted_proposal.id, client_user)


def test_unknown_proposal(client_user):
    with pytest.raises(NotFound):
        ContractService.create_from_proposal(424242, client_user)


def test_add_milestone_appends_and_updates_progress(contract, milestones, client_user, freelancer):
    first = milestones[0]
    MilestoneLedger.fund(contract.id, first.id, client_user)
    MilestoneLedger.submit(contract.id, first.id, freelancer)
    MilestoneLedger.approve(contract.id, first.id, client_user)

    milestone = ContractService.add_milestone(
        contract.id, client_user, title='Launch', amount=Decimal('250.00')
    )

    contract.refresh_from_db()
    assert milestone.position == 2
    assert milestone.status == Milestone.Status.PENDING
    assert contract.progress == 33


def test_add_milestone_is_client_only(contract, freelancer):
    with pytest.raises(Forbidden):
        ContractService.add_milestone(contract.id, freelancer, title='Extra', amount=Decimal('10.00'))


def test_cancel_refunds_escrow(contract, milestones, client_user, freelancer):
    MilestoneLedger.fund(contract.id, milestones[0].id, client_user)
    MilestoneLedger.fund(contract.id, milestones[1].id, client_user)
    MilestoneLedger.submit(contract.id, milestones[1].id, freelancer)

    contract = ContractService.cancel(contract.id, freelancer)

    assert contract.status == Contract.Status.CANCELLED
    assert contract.end_date is not None
    wallet = Wallet.objects.get(user=client_user)
    assert wallet.balance == Decimal('5000.00')
    assert wallet.escrow_balance == Decimal('0.00')
    assert Project.objects.get(pk=contract.project_id).status == Project.Status.CANCELLED
    assert Notification.objects.filter(
        recipient=client_user, type=Notification.Type.CONTRACT_CANCELLED
    ).exists()


def test_cancel_clears_escrow_timestamps(contract, milestones, client_user, freelancer):
    MilestoneLedger.fund(contract.id, milestones[0].id, client_user)
    MilestoneLedger.fund(contract.id, milestones[1].id, client_user)
    MilestoneLedger.submit(contract.id, milestones[1].id, freelancer)
    ContractService.add_milestone(contract.id, client_user, title='Handover', amount=Decimal('50.00'))

    ContractService.cancel(contract.id, client_user)

    funded, submitted, untouched = Milestone.objects.filter(contract=contract).order_by('position')
    for milestone in (funded, submitted):
        assert milestone.funded_at is None
        assert milestone.submitted_at is None
        assert milestone.refunded_at is not None
        assert Transaction.objects.filter(
            related_milestone_id=str(milestone.id),
            transaction_type=Transaction.TransactionType.REFUND,
        ).count() == 1
    assert untouched.refunded_at is None
    assert not Transaction.objects.filter(related_milestone_id=str(untouched.id)).exists()


def test_cancel_with_paid_milestone_is_refused(contract, milestones, client_user, freelancer):
    first = milestones[0]
    MilestoneLedger.fund(contract.id, first.id, client_user)
    MilestoneLedger.submit(contract.id, first.id, freelancer)
    MilestoneLedger.approve(contract.id, first.id, client_user)

    with pytest.raises(InvalidTransition):
        ContractService.cancel(contract.id, client_user)

    contract.refresh_from_db()
    assert contract.status == Contract.Status.ACTIVE


def test_cancel_by_outsider(contract, outsider):
    with pytest.raises(Forbidden):
        ContractService.cancel(contract.id, outsider)


def test_cancelled_contract_is_locked(contract, milestones, client_user):
    ContractService.cancel(contract.id, client_user)

    with pytest.raises(ContractLocked):
        ContractService.cancel(contract.id, client_user)
    with pytest.raises(ContractLocked):
        MilestoneLedger.fund(contract.id, milestones[0].id, client_user)
    with pytest.raises(ContractLocked):
        ContractService.add_milestone(contract.id, client_user, title='Late', amount=Decimal('5.00'))
