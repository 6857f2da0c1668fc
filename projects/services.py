import logging
from django.db import transaction
from jobboard_core.exceptions import Conflict, Forbidden, InvalidTransition, NotFound
from notifications.models import Notification
from notifications.services import NotificationService
from .models import Project, Proposal

logger = logging.getLogger(__name__)


class ProposalService:
    """
    Proposal lifecycle up to the point where a contract can be created.
    """

    @classmethod
    @transaction.atomic
    def submit(cls, project_id, freelancer, **data):
        try:
            project = Project.objects.select_for_update().get(pk=project_id)
        except Project.DoesNotExist:
            raise NotFound("Project not found.")

        if project.status != Project.Status.OPEN:
            raise InvalidTransition("This project is not accepting proposals.")
        if project.client_id == freelancer.pk:
            raise Forbidden("You cannot bid on your own project.")
        if Proposal.objects.filter(project=project, freelancer=freelancer).exists():
            raise Conflict("You have already submitted a proposal for this project.")

        proposal = Proposal.objects.create(project=project, freelancer=freelancer, **data)

        NotificationService.notify(
            project.client,
            Notification.Type.PROPOSAL_RECEIVED,
            "New proposal on your project",
            f'A new proposal was submitted on "{project.title}"',
            link=f"/projects/{project.id}",
            metadata={"proposal_id": proposal.id, "bid_amount": str(proposal.bid_amount)},
        )
        return proposal

    @classmethod
    @transaction.atomic
    def decide(cls, proposal_id, actor, status):
        """
        Project owner accepts or rejects a pending proposal.
        Accepting assigns the freelancer and rejects every other pending bid.
        """
        try:
            proposal = Proposal.objects.select_for_update().select_related('project').get(pk=proposal_id)
        except Proposal.DoesNotExist:
            raise NotFound("Proposal not found.")

        project = proposal.project
        if project.client_id != actor.pk:
            raise Forbidden("Only the project owner can decide on proposals.")
        if status not in (Proposal.Status.ACCEPTED, Proposal.Status.REJECTED):
            raise InvalidTransition(f"Cannot set a proposal to {status}.")
        if proposal.status != Proposal.Status.PENDING:
            raise InvalidTransition(f"Proposal is already {proposal.status}.")
        if status == Proposal.Status.ACCEPTED and project.status != Project.Status.OPEN:
            raise InvalidTransition("This project already has an accepted proposal.")

        proposal.status = status
        proposal.save()

        if status == Proposal.Status.ACCEPTED:
            project.status = Project.Status.IN_PROGRESS
            project.assigned_to = proposal.freelancer
            project.save()

            Proposal.objects.filter(
                project=project, status=Proposal.Status.PENDING
            ).exclude(pk=proposal.pk).update(status=Proposal.Status.REJECTED)

        accepted = status == Proposal.Status.ACCEPTED
        NotificationService.notify(
            proposal.freelancer,
            Notification.Type.PROPOSAL_ACCEPTED if accepted else Notification.Type.PROPOSAL_REJECTED,
            "Your proposal was accepted" if accepted else "Your proposal was declined",
            f'Your proposal on "{project.title}" was {"accepted" if accepted else "declined"}',
            link=f"/projects/{project.id}",
            metadata={"proposal_id": proposal.id},
        )
        logger.info("Proposal %s on project %s set to %s", proposal.id, project.id, status)
        return proposal

    @classmethod
    @transaction.atomic
    def withdraw(cls, proposal_id, actor):
        try:
            proposal = Proposal.objects.select_for_update().get(pk=proposal_id)
        except Proposal.DoesNotExist:
            raise NotFound("Proposal not found.")

        if proposal.freelancer_id != actor.pk:
            raise Forbidden("You can only withdraw your own proposals.")
        if proposal.status != Proposal.Status.PENDING:
            raise InvalidTransition("Only pending proposals can be withdrawn.")

        proposal.status = Proposal.Status.WITHDRAWN
        proposal.save()
        return proposal
