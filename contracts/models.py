from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _

class Contract(models.Model):
    """
    Agreement between a client and a freelancer, created from an accepted
    proposal and paid out milestone by milestone. Never deleted.
    """
    class Status(models.TextChoices):
        ACTIVE = 'ACTIVE', _('Active')
        COMPLETED = 'COMPLETED', _('Completed')
        DISPUTED = 'DISPUTED', _('Disputed')
        CANCELLED = 'CANCELLED', _('Cancelled')

    project = models.ForeignKey('projects.Project', on_delete=models.PROTECT, related_name='contracts')
    proposal = models.OneToOneField('projects.Proposal', on_delete=models.PROTECT, related_name='contract')
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='client_contracts'
    )
    freelancer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='freelancer_contracts'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE
    )
    # Derived from milestones on every transition, never set directly.
    progress = models.PositiveSmallIntegerField(default=0)

    start_date = models.DateTimeField(auto_now_add=True)
    end_date = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_date']
        indexes = [
            models.Index(fields=['client']),
            models.Index(fields=['freelancer']),
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return f"Contract #{self.id} - {self.title} ({self.status})"

    def is_party(self, user):
        return user.pk in (self.client_id, self.freelancer_id)

    def counterparty_of(self, user):
        return self.freelancer if user.pk == self.client_id else self.client

class Milestone(models.Model):
    class Status(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        FUNDED = 'FUNDED', _('Funded (Escrow)')
        SUBMITTED = 'SUBMITTED', _('Submitted')
        APPROVED = 'APPROVED', _('Approved')
        PAID = 'PAID', _('Paid')
        REJECTED = 'REJECTED', _('Rejected')

    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='milestones')
    position = models.PositiveIntegerField(default=0)
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=1000, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )
    deliverables = models.JSONField(default=list, blank=True) # [{"name": ..., "url": ...}]

    # Rework cycle bookkeeping; every reason is also kept in MilestoneEvent.
    revision_count = models.PositiveIntegerField(default=0)
    rejection_reason = models.TextField(blank=True)

    funded_at = models.DateTimeField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    # Last time the escrow went back to the client (rejection or cancellation).
    refunded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['position', 'id']

    def __str__(self):
        return f"{self.title} - {self.amount} ({self.status})"

class MilestoneEvent(models.Model):
    """
    Append-only history of milestone status edges, including the transient
    APPROVED and REJECTED steps that are never left persisted on the milestone.
    """
    milestone = models.ForeignKey(Milestone, on_delete=models.CASCADE, related_name='events')
    from_status = models.CharField(max_length=20, choices=Milestone.Status.choices)
    to_status = models.CharField(max_length=20, choices=Milestone.Status.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='+'
    )
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.milestone_id}: {self.from_status} -> {self.to_status}"
