import logging
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from finance.services import WalletService
from jobboard_core.exceptions import Conflict, ContractLocked, Forbidden, InvalidTransition, NotFound
from notifications.models import Notification
from notifications.services import NotificationService
from projects.models import FreelancerProfile, Project, Proposal
from .models import Contract, Milestone, MilestoneEvent
from .state import (
    ESCROWED_MILESTONE_STATUSES,
    check_milestone_transition,
    compute_progress,
    derive_status,
)

logger = logging.getLogger(__name__)

Status = Milestone.Status


def load_contract_for_update(contract_id):
    """
    Lock the contract row for the rest of the transaction. Every transition on
    the aggregate goes through here, so two requests on the same contract
    serialize while different contracts never wait on each other.
    """
    try:
        return Contract.objects.select_for_update().select_related('client', 'freelancer').get(pk=contract_id)
    except Contract.DoesNotExist:
        raise NotFound("Contract not found.")


def _contract_link(contract):
    return f"/contracts/{contract.id}"


class ContractService:
    """
    Owns the overall contract status. Status is always re-derived from the
    milestone set rather than patched inline by each operation.
    """

    @classmethod
    @transaction.atomic
    def create_from_proposal(cls, proposal_id, actor, milestones=None):
        try:
            proposal = Proposal.objects.select_for_update().select_related('project').get(pk=proposal_id)
        except Proposal.DoesNotExist:
            raise NotFound("Proposal not found.")

        project = proposal.project
        if project.client_id != actor.pk:
            raise Forbidden("Only the project owner can create its contract.")
        if proposal.status != Proposal.Status.ACCEPTED:
            raise InvalidTransition("Only an accepted proposal can become a contract.")
        if Contract.objects.filter(proposal=proposal).exists():
            raise Conflict("A contract already exists for this proposal.")

        contract = Contract.objects.create(
            project=project,
            proposal=proposal,
            client=actor,
            freelancer=proposal.freelancer,
            title=project.title,
            description=project.description,
            total_amount=proposal.bid_amount,
        )

        if not milestones:
            milestones = [{'title': 'Project delivery', 'amount': proposal.bid_amount}]
        for position, data in enumerate(milestones):
            Milestone.objects.create(contract=contract, position=position, **data)

        cls.sync_status(contract)

        NotificationService.notify(
            contract.freelancer,
            Notification.Type.CONTRACT_CREATED,
            "New contract",
            f'A contract was created for project "{project.title}"',
            link=_contract_link(contract),
            metadata={"contract_id": contract.id},
        )
        logger.info("Contract %s created from proposal %s", contract.id, proposal.id)
        return contract

    @classmethod
    @transaction.atomic
    def add_milestone(cls, contract_id, actor, **data):
        contract = load_contract_for_update(contract_id)
        if actor.pk != contract.client_id:
            raise Forbidden("Only the client can add milestones.")
        cls.ensure_mutable(contract)

        last = contract.milestones.order_by('-position').first()
        milestone = Milestone.objects.create(
            contract=contract,
            position=(last.position + 1) if last else 0,
            **data
        )
        cls.sync_status(contract)
        return milestone

    @classmethod
    @transaction.atomic
    def cancel(cls, contract_id, actor):
        contract = load_contract_for_update(contract_id)
        if not contract.is_party(actor):
            raise Forbidden("Only the contract parties can cancel it.")
        cls.ensure_mutable(contract)

        milestones = list(contract.milestones.all())
        if any(m.status == Status.PAID for m in milestones):
            raise InvalidTransition("A contract with paid milestones cannot be cancelled.")

        now = timezone.now()
        for milestone in milestones:
            if milestone.status in ESCROWED_MILESTONE_STATUSES:
                milestone.contract = contract
                WalletService.refund_milestone_escrow(milestone, reason="Contract cancelled")
                # Status stays as it was; the timestamps show the escrow is gone.
                milestone.funded_at = None
                milestone.submitted_at = None
                milestone.refunded_at = now
                milestone.save(update_fields=["funded_at", "submitted_at", "refunded_at"])

        contract.status = Contract.Status.CANCELLED
        contract.end_date = now
        contract.save()
        Project.objects.filter(pk=contract.project_id).update(status=Project.Status.CANCELLED)

        NotificationService.notify(
            contract.counterparty_of(actor),
            Notification.Type.CONTRACT_CANCELLED,
            "Contract cancelled",
            f'The contract "{contract.title}" was cancelled by {actor.display_name}',
            link=_contract_link(contract),
            metadata={"contract_id": contract.id},
        )
        logger.info("Contract %s cancelled by user %s", contract.id, actor.pk)
        return contract

    @classmethod
    def ensure_mutable(cls, contract):
        if contract.status != Contract.Status.ACTIVE:
            raise ContractLocked(f"Contract is {contract.status} and cannot be changed.")

    @classmethod
    def sync_status(cls, contract, dispute_open=False):
        """
        Recompute progress and status from the persisted milestones, run the
        completion side effects on the ACTIVE/DISPUTED -> COMPLETED edge and save.
        """
        statuses = list(contract.milestones.values_list('status', flat=True))
        previous = contract.status
        contract.progress = compute_progress(statuses)
        contract.status = derive_status(
            statuses,
            dispute_open=dispute_open,
            cancelled=previous == Contract.Status.CANCELLED,
        )

        completed_now = (
            contract.status == Contract.Status.COMPLETED and previous != Contract.Status.COMPLETED
        )
        if completed_now:
            contract.end_date = timezone.now()
        contract.save()

        if completed_now:
            cls._on_completed(contract)
        return contract.status

    @classmethod
    def _on_completed(cls, contract):
        Project.objects.filter(pk=contract.project_id).update(status=Project.Status.COMPLETED)
        profile, _ = FreelancerProfile.objects.get_or_create(user=contract.freelancer)
        FreelancerProfile.objects.filter(pk=profile.pk).update(completed_projects=F('completed_projects') + 1)

        for party, body in (
            (contract.client, f'The project "{contract.title}" was completed successfully'),
            (contract.freelancer, f'Congratulations! The project "{contract.title}" was completed successfully'),
        ):
            NotificationService.notify(
                party,
                Notification.Type.CONTRACT_COMPLETED,
                "Project completed",
                body,
                link=_contract_link(contract),
                metadata={"contract_id": contract.id},
            )
        logger.info("Contract %s completed", contract.id)


class MilestoneLedger:
    """
    Funding, submission, approval and rejection of a contract's milestones.
    Each call locks the contract, validates the edge, persists, then notifies
    the counterparty.
    """

    @classmethod
    def _load(cls, contract_id, milestone_id):
        contract = load_contract_for_update(contract_id)
        try:
            milestone = contract.milestones.get(pk=milestone_id)
        except Milestone.DoesNotExist:
            raise NotFound("Milestone not found.")
        # Reuse the locked instance so wallet code sees the same parties.
        milestone.contract = contract
        return contract, milestone

    @classmethod
    def _require(cls, contract, actor, party):
        expected = contract.client_id if party == 'client' else contract.freelancer_id
        if actor.pk != expected:
            raise Forbidden(f"Only the contract's {party} can perform this action.")
        ContractService.ensure_mutable(contract)

    @classmethod
    def _move(cls, milestone, target, actor, note=""):
        check_milestone_transition(milestone.status, target)
        MilestoneEvent.objects.create(
            milestone=milestone,
            from_status=milestone.status,
            to_status=target,
            actor=actor,
            note=note,
        )
        milestone.status = target

    @classmethod
    def _notify(cls, recipient, type, title, body, contract, milestone, **extra):
        metadata = {"contract_id": contract.id, "milestone_id": milestone.id}
        metadata.update(extra)
        NotificationService.notify(
            recipient, type, title, body,
            link=_contract_link(contract), metadata=metadata,
        )

    @classmethod
    @transaction.atomic
    def fund(cls, contract_id, milestone_id, actor):
        contract, milestone = cls._load(contract_id, milestone_id)
        cls._require(contract, actor, 'client')
        check_milestone_transition(milestone.status, Status.FUNDED)

        WalletService.lock_funds_for_milestone(milestone)
        cls._move(milestone, Status.FUNDED, actor)
        milestone.funded_at = timezone.now()
        milestone.save()
        ContractService.sync_status(contract)

        cls._notify(
            contract.freelancer, Notification.Type.MILESTONE_FUNDED,
            "Milestone funded",
            f'"{milestone.title}" is funded, you can start working on it',
            contract, milestone, amount=str(milestone.amount),
        )
        logger.info("Milestone %s of contract %s funded", milestone.id, contract.id)
        return contract, milestone

    @classmethod
    @transaction.atomic
    def submit(cls, contract_id, milestone_id, actor, deliverables=None):
        contract, milestone = cls._load(contract_id, milestone_id)
        cls._require(contract, actor, 'freelancer')

        cls._move(milestone, Status.SUBMITTED, actor)
        milestone.submitted_at = timezone.now()
        if deliverables:
            milestone.deliverables = deliverables
        milestone.save()
        ContractService.sync_status(contract)

        cls._notify(
            contract.client, Notification.Type.MILESTONE_SUBMITTED,
            "Milestone submitted",
            f'The freelancer submitted "{milestone.title}" on "{contract.title}"',
            contract, milestone,
        )
        logger.info("Milestone %s of contract %s submitted", milestone.id, contract.id)
        return contract, milestone

    @classmethod
    @transaction.atomic
    def approve(cls, contract_id, milestone_id, actor):
        """
        Approval and payment release are one logical step: the milestone
        passes through APPROVED and is persisted as PAID.
        """
        contract, milestone = cls._load(contract_id, milestone_id)
        cls._require(contract, actor, 'client')

        cls._move(milestone, Status.APPROVED, actor)
        now = timezone.now()
        milestone.approved_at = now

        WalletService.release_milestone_escrow(milestone)
        profile, _ = FreelancerProfile.objects.get_or_create(user=contract.freelancer)
        FreelancerProfile.objects.filter(pk=profile.pk).update(total_earnings=F('total_earnings') + milestone.amount)

        cls._move(milestone, Status.PAID, actor)
        milestone.paid_at = now
        milestone.save()

        cls._notify(
            contract.freelancer, Notification.Type.MILESTONE_APPROVED,
            "Milestone approved",
            f'"{milestone.title}" was approved and {milestone.amount} was released to your wallet',
            contract, milestone, amount=str(milestone.amount),
        )
        ContractService.sync_status(contract)
        logger.info("Milestone %s of contract %s approved and paid", milestone.id, contract.id)
        return contract, milestone

    @classmethod
    @transaction.atomic
    def reject(cls, contract_id, milestone_id, actor, reason):
        """
        Send the work back for rework. The escrow is returned to the client,
        who funds the milestone again when the rework starts.
        """
        contract, milestone = cls._load(contract_id, milestone_id)
        cls._require(contract, actor, 'client')

        cls._move(milestone, Status.REJECTED, actor, note=reason)
        WalletService.refund_milestone_escrow(milestone, reason="Milestone rejected")
        cls._move(milestone, Status.PENDING, actor, note="Returned for rework")

        milestone.revision_count += 1
        milestone.rejection_reason = reason
        milestone.funded_at = None
        milestone.submitted_at = None
        milestone.refunded_at = timezone.now()
        milestone.save()
        ContractService.sync_status(contract)

        cls._notify(
            contract.freelancer, Notification.Type.MILESTONE_REJECTED,
            "Changes requested",
            f'Changes were requested on "{milestone.title}": {reason}',
            contract, milestone, reason=reason,
        )
        logger.info("Milestone %s of contract %s rejected (revision %s)", milestone.id, contract.id, milestone.revision_count)
        return contract, milestone
