from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _

class Notification(models.Model):
    """
    A persisted message for one user. Created as a side effect of workflow
    transitions; only the recipient flips is_read.
    """
    class Type(models.TextChoices):
        PROPOSAL_RECEIVED = 'PROPOSAL_RECEIVED', _('Proposal Received')
        PROPOSAL_ACCEPTED = 'PROPOSAL_ACCEPTED', _('Proposal Accepted')
        PROPOSAL_REJECTED = 'PROPOSAL_REJECTED', _('Proposal Rejected')
        CONTRACT_CREATED = 'CONTRACT_CREATED', _('Contract Created')
        CONTRACT_COMPLETED = 'CONTRACT_COMPLETED', _('Contract Completed')
        CONTRACT_CANCELLED = 'CONTRACT_CANCELLED', _('Contract Cancelled')
        MILESTONE_FUNDED = 'MILESTONE_FUNDED', _('Milestone Funded')
        MILESTONE_SUBMITTED = 'MILESTONE_SUBMITTED', _('Milestone Submitted')
        MILESTONE_APPROVED = 'MILESTONE_APPROVED', _('Milestone Approved')
        MILESTONE_REJECTED = 'MILESTONE_REJECTED', _('Milestone Rejected')
        DISPUTE_OPENED = 'DISPUTE_OPENED', _('Dispute Opened')
        DISPUTE_UNDER_REVIEW = 'DISPUTE_UNDER_REVIEW', _('Dispute Under Review')
        DISPUTE_CLOSED = 'DISPUTE_CLOSED', _('Dispute Closed')
        SYSTEM = 'SYSTEM', _('System')

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=30, choices=Type.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', '-created_at']),
            models.Index(fields=['recipient', 'is_read']),
        ]

    def __str__(self):
        return f"{self.type} -> {self.recipient_id}"
