from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _

class Dispute(models.Model):
    """
    Administrator-mediated escalation of a contract. While one is open the
    contract is DISPUTED and its milestones are frozen.
    """
    class Status(models.TextChoices):
        OPEN = 'OPEN', _('Open')
        UNDER_REVIEW = 'UNDER_REVIEW', _('Under Review')
        RESOLVED = 'RESOLVED', _('Resolved')
        REJECTED = 'REJECTED', _('Rejected')

    ACTIVE_STATUSES = (Status.OPEN, Status.UNDER_REVIEW)
    OUTCOMES = (Status.RESOLVED, Status.REJECTED)

    contract = models.ForeignKey('contracts.Contract', on_delete=models.PROTECT, related_name='disputes')
    initiator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='disputes_opened'
    )
    defendant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='disputes_received'
    )
    reason = models.TextField(max_length=2000)
    evidence = models.JSONField(default=list, blank=True) # [{"name": ..., "url": ...}]

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.OPEN
    )
    assigned_admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='disputes_claimed'
    )
    claimed_at = models.DateTimeField(null=True, blank=True)

    # Final Decision
    final_decision = models.TextField(blank=True)
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='disputes_decided'
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['contract'],
                condition=models.Q(status__in=['OPEN', 'UNDER_REVIEW']),
                name='one_active_dispute_per_contract',
            ),
        ]
        indexes = [
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return f"Dispute #{self.pk} on contract #{self.contract_id} ({self.status})"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES

    def involves(self, user):
        return user.pk in (self.initiator_id, self.defendant_id)

class DisputeMessage(models.Model):
    dispute = models.ForeignKey(Dispute, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True)
    message = models.TextField()
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"Message on dispute #{self.dispute_id}"
