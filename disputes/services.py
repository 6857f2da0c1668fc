import logging
from django.db import transaction
from django.utils import timezone
from contracts.services import ContractService, load_contract_for_update
from jobboard_core.exceptions import Conflict, Forbidden, InvalidTransition, NotFound
from notifications.models import Notification
from notifications.services import NotificationService
from .models import Dispute, DisputeMessage

logger = logging.getLogger(__name__)


def _dispute_link(dispute):
    return f"/contracts/{dispute.contract_id}/dispute"


class DisputeService:
    """
    OPEN -> UNDER_REVIEW (an admin claims it) -> RESOLVED | REJECTED.
    The contract row is locked before the dispute row so that dispute
    operations and milestone operations on one contract serialize.
    """

    @classmethod
    def _require_admin(cls, actor):
        if not actor.is_platform_admin:
            raise Forbidden("Only platform administrators can handle disputes.")

    @classmethod
    def _load_locked(cls, dispute_id):
        contract_id = (
            Dispute.objects.filter(pk=dispute_id).values_list('contract_id', flat=True).first()
        )
        if contract_id is None:
            raise NotFound("Dispute not found.")
        contract = load_contract_for_update(contract_id)
        dispute = Dispute.objects.select_for_update().get(pk=dispute_id)
        dispute.contract = contract
        return contract, dispute

    @classmethod
    @transaction.atomic
    def raise_dispute(cls, contract_id, initiator, reason, evidence=None):
        contract = load_contract_for_update(contract_id)
        if not contract.is_party(initiator):
            raise Forbidden("You are not authorized to open a dispute for this contract.")
        if contract.disputes.filter(status__in=Dispute.ACTIVE_STATUSES).exists():
            raise Conflict("A dispute is already open for this contract.")
        ContractService.ensure_mutable(contract)

        dispute = Dispute.objects.create(
            contract=contract,
            initiator=initiator,
            defendant=contract.counterparty_of(initiator),
            reason=reason,
            evidence=evidence or [],
        )
        ContractService.sync_status(contract, dispute_open=True)

        metadata = {"contract_id": contract.id, "dispute_id": dispute.id}
        NotificationService.notify(
            dispute.defendant,
            Notification.Type.DISPUTE_OPENED,
            "New dispute opened",
            f'The other party opened a dispute on the contract "{contract.title}"',
            link=_dispute_link(dispute),
            metadata=metadata,
        )
        NotificationService.notify_admins(
            Notification.Type.DISPUTE_OPENED,
            "Dispute awaiting review",
            f'A dispute was opened on contract "{contract.title}": {reason}',
            link=f"/admin/disputes/{dispute.id}",
            metadata=metadata,
            exclude=initiator,
        )
        logger.info("Dispute %s opened on contract %s by user %s", dispute.id, contract.id, initiator.pk)
        return dispute

    @classmethod
    @transaction.atomic
    def claim(cls, dispute_id, admin):
        cls._require_admin(admin)
        contract, dispute = cls._load_locked(dispute_id)

        if dispute.status == Dispute.Status.UNDER_REVIEW:
            if dispute.assigned_admin_id == admin.pk:
                return dispute
            raise Conflict("This dispute is already being reviewed by another administrator.")
        if dispute.status != Dispute.Status.OPEN:
            raise InvalidTransition(f"Dispute is {dispute.status} and cannot be claimed.")

        dispute.status = Dispute.Status.UNDER_REVIEW
        dispute.assigned_admin = admin
        dispute.claimed_at = timezone.now()
        dispute.save()

        for party in (dispute.initiator, dispute.defendant):
            NotificationService.notify(
                party,
                Notification.Type.DISPUTE_UNDER_REVIEW,
                "Dispute under review",
                f'An administrator is now reviewing the dispute on "{contract.title}"',
                link=_dispute_link(dispute),
                metadata={"contract_id": contract.id, "dispute_id": dispute.id},
            )
        logger.info("Dispute %s claimed by admin %s", dispute.id, admin.pk)
        return dispute

    @classmethod
    @transaction.atomic
    def resolve(cls, dispute_id, admin, outcome, decision=""):
        cls._require_admin(admin)
        if outcome not in Dispute.OUTCOMES:
            raise InvalidTransition(f"{outcome} is not a valid dispute outcome.")
        contract, dispute = cls._load_locked(dispute_id)

        if dispute.status != Dispute.Status.UNDER_REVIEW:
            raise InvalidTransition("Only a dispute under review can be resolved.")
        if dispute.assigned_admin_id != admin.pk:
            raise Conflict("Only the administrator reviewing this dispute can close it.")

        dispute.status = outcome
        dispute.final_decision = decision
        dispute.decided_by = admin
        dispute.decided_at = timezone.now()
        dispute.save()

        contract_status = ContractService.sync_status(contract, dispute_open=False)

        verdict = "resolved" if outcome == Dispute.Status.RESOLVED else "rejected"
        for party in (dispute.initiator, dispute.defendant):
            NotificationService.notify(
                party,
                Notification.Type.DISPUTE_CLOSED,
                f"Dispute {verdict}",
                f'The dispute on "{contract.title}" was {verdict}. {decision}'.strip(),
                link=_dispute_link(dispute),
                metadata={"contract_id": contract.id, "dispute_id": dispute.id, "outcome": outcome},
            )
        logger.info("Dispute %s %s by admin %s, contract %s now %s",
                    dispute.id, verdict, admin.pk, contract.id, contract_status)
        return dispute

    @classmethod
    @transaction.atomic
    def add_message(cls, dispute_id, actor, message, attachments=None):
        try:
            dispute = Dispute.objects.select_for_update().get(pk=dispute_id)
        except Dispute.DoesNotExist:
            raise NotFound("Dispute not found.")

        if not (dispute.involves(actor) or actor.is_platform_admin):
            raise Forbidden("You are not a participant in this dispute.")
        if not dispute.is_active:
            raise InvalidTransition("This dispute is closed.")

        return DisputeMessage.objects.create(
            dispute=dispute,
            sender=actor,
            message=message,
            attachments=attachments or [],
        )
