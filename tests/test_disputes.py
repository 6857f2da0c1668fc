import pytest

from contracts.models import Contract
from contracts.services import ContractService, MilestoneLedger
from disputes.models import Dispute
from disputes.services import DisputeService
from jobboard_core.exceptions import Conflict, ContractLocked, Forbidden, InvalidTransition, NotFound
from notifications.models import Notification

pytestmark = pytest.mark.django_db


def pay(contract, milestone, client_user, freelancer):
    MilestoneLedger.fund(contract.id, milestone.id, client_user)
    MilestoneLedger.submit(contract.id, milestone.id, freelancer)
    return MilestoneLedger.approve(contract.id, milestone.id, client_user)


@pytest.fixture
def open_dispute(contract, freelancer, admin_user):
    return DisputeService.raise_dispute(contract.id, freelancer, 'Client stopped responding')


def test_full_dispute_round_trip(contract, milestones, client_user, freelancer, admin_user):
    first, second = milestones

    contract, milestone = pay(contract, first, client_user, freelancer)
    assert milestone.status == 'PAID'
    assert contract.progress == 50
    assert contract.status == Contract.Status.ACTIVE

    dispute = DisputeService.raise_dispute(contract.id, freelancer, 'Scope keeps changing')
    contract.refresh_from_db()
    assert dispute.status == Dispute.Status.OPEN
    assert dispute.defendant == client_user
    assert contract.status == Contract.Status.DISPUTED

    with pytest.raises(ContractLocked):
        MilestoneLedger.fund(contract.id, second.id, client_user)

    DisputeService.claim(dispute.id, admin_user)
    dispute = DisputeService.resolve(dispute.id, admin_user, Dispute.Status.RESOLVED, 'Scope fixed as agreed')
    contract.refresh_from_db()
    assert dispute.status == Dispute.Status.RESOLVED
    assert dispute.decided_by == admin_user
    assert contract.status == Contract.Status.ACTIVE

    contract, _ = pay(contract, second, client_user, freelancer)
    assert contract.status == Contract.Status.COMPLETED
    assert contract.progress == 100


def test_disputed_contract_refuses_every_milestone_action(contract, milestones, client_user, freelancer):
    first, second = milestones
    MilestoneLedger.fund(contract.id, first.id, client_user)
    MilestoneLedger.fund(contract.id, second.id, client_user)
    MilestoneLedger.submit(contract.id, second.id, freelancer)

    DisputeService.raise_dispute(contract.id, client_user, 'Delivery does not match the brief')

    with pytest.raises(ContractLocked):
        MilestoneLedger.submit(contract.id, first.id, freelancer)
    with pytest.raises(ContractLocked):
        MilestoneLedger.approve(contract.id, second.id, client_user)
    with pytest.raises(ContractLocked):
        MilestoneLedger.reject(contract.id, second.id, client_user, 'Wrong colours')

    assert [m.status for m in contract.milestones.all()] == ['FUNDED', 'SUBMITTED']


def test_dispute_notifies_defendant_and_admins(open_dispute, client_user, freelancer, admin_user):
    assert Notification.objects.filter(recipient=client_user, type=Notification.Type.DISPUTE_OPENED).exists()
    assert Notification.objects.filter(recipient=admin_user, type=Notification.Type.DISPUTE_OPENED).exists()
    assert not Notification.objects.filter(recipient=freelancer, type=Notification.Type.DISPUTE_OPENED).exists()


def test_second_active_dispute_conflicts(open_dispute, contract, client_user, admin_user):
    with pytest.raises(Conflict):
        DisputeService.raise_dispute(contract.id, client_user, 'Me too')

    DisputeService.claim(open_dispute.id, admin_user)
    with pytest.raises(Conflict):
        DisputeService.raise_dispute(contract.id, client_user, 'Still me')


def test_new_dispute_allowed_after_resolution(open_dispute, contract, client_user, admin_user):
    DisputeService.claim(open_dispute.id, admin_user)
    DisputeService.resolve(open_dispute.id, admin_user, Dispute.Status.REJECTED)

    again = DisputeService.raise_dispute(contract.id, client_user, 'Deadline missed')
    assert again.status == Dispute.Status.OPEN
    assert contract.disputes.count() == 2


def test_only_parties_raise_disputes(contract, outsider):
    with pytest.raises(Forbidden):
        DisputeService.raise_dispute(contract.id, outsider, 'Not mine')


def test_cannot_dispute_cancelled_contract(contract, client_user):
    ContractService.cancel(contract.id, client_user)
    with pytest.raises(ContractLocked):
        DisputeService.raise_dispute(contract.id, client_user, 'Too late')


def test_claim_requires_admin(open_dispute, client_user):
    with pytest.raises(Forbidden):
        DisputeService.claim(open_dispute.id, client_user)


def test_claim_is_idempotent_for_same_admin(open_dispute, admin_user):
    first = DisputeService.claim(open_dispute.id, admin_user)
    again = DisputeService.claim(open_dispute.id, admin_user)

    assert again.status == Dispute.Status.UNDER_REVIEW
    assert again.assigned_admin == admin_user
    assert again.claimed_at == first.claimed_at
    assert Notification.objects.filter(type=Notification.Type.DISPUTE_UNDER_REVIEW).count() == 2


def test_claim_by_second_admin_conflicts(open_dispute, admin_user, other_admin):
    DisputeService.claim(open_dispute.id, admin_user)
    with pytest.raises(Conflict):
        DisputeService.claim(open_dispute.id, other_admin)

    open_dispute.refresh_from_db()
    assert open_dispute.assigned_admin == admin_user


def test_resolve_requires_review(open_dispute, admin_user):
    with pytest.raises(InvalidTransition):
        DisputeService.resolve(open_dispute.id, admin_user, Dispute.Status.RESOLVED)


def test_resolve_by_other_admin_conflicts(open_dispute, admin_user, other_admin):
    DisputeService.claim(open_dispute.id, admin_user)
    with pytest.raises(Conflict):
        DisputeService.resolve(open_dispute.id, other_admin, Dispute.Status.RESOLVED)


def test_resolve_rejects_unknown_outcome(open_dispute, admin_user):
    DisputeService.claim(open_dispute.id, admin_user)
    with pytest.raises(InvalidTransition):
        DisputeService.resolve(open_dispute.id, admin_user, Dispute.Status.OPEN)


def test_closed_dispute_cannot_be_reclaimed(open_dispute, admin_user, contract):
    DisputeService.claim(open_dispute.id, admin_user)
    DisputeService.resolve(open_dispute.id, admin_user, Dispute.Status.REJECTED, 'No breach found')

    with pytest.raises(InvalidTransition):
        DisputeService.claim(open_dispute.id, admin_user)
    with pytest.raises(InvalidTransition):
        DisputeService.resolve(open_dispute.id, admin_user, Dispute.Status.RESOLVED)

    contract.refresh_from_db()
    assert contract.status == Contract.Status.ACTIVE
    assert Notification.objects.filter(type=Notification.Type.DISPUTE_CLOSED).count() == 2


def test_approval_after_resolution_completes_contract(contract, milestones, client_user, freelancer, admin_user):
    for milestone in milestones:
        MilestoneLedger.fund(contract.id, milestone.id, client_user)
        MilestoneLedger.submit(contract.id, milestone.id, freelancer)
    MilestoneLedger.approve(contract.id, milestones[0].id, client_user)

    dispute = DisputeService.raise_dispute(contract.id, client_user, 'Second delivery is broken')
    DisputeService.claim(dispute.id, admin_user)
    DisputeService.resolve(dispute.id, admin_user, Dispute.Status.REJECTED)

    contract, _ = MilestoneLedger.approve(contract.id, milestones[1].id, client_user)
    assert contract.status == Contract.Status.COMPLETED


def test_unknown_dispute(admin_user):
    with pytest.raises(NotFound):
        DisputeService.claim(999999, admin_user)


def test_messages_only_from_participants(open_dispute, client_user, outsider, admin_user):
    message = DisputeService.add_message(open_dispute.id, client_user, 'Here is the chat log')
    assert message.sender == client_user
    DisputeService.add_message(open_dispute.id, admin_user, 'Reviewing now')
    assert open_dispute.messages.count() == 2

    with pytest.raises(Forbidden):
        DisputeService.add_message(open_dispute.id, outsider, 'Hello')


def test_no_messages_on_closed_dispute(open_dispute, client_user, admin_user):
    DisputeService.claim(open_dispute.id, admin_user)
    DisputeService.resolve(open_dispute.id, admin_user, Dispute.Status.RESOLVED)
    with pytest.raises(InvalidTransition):
        DisputeService.add_message(open_dispute.id, client_user, 'One more thing')
