from decimal import Decimal
from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _

class FreelancerProfile(models.Model):
    """
    Extended profile for Freelancers: skills and track record.
    Earnings and completed projects are maintained by the contract workflow.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='freelancer_profile'
    )
    title = models.CharField(max_length=150, blank=True)
    bio = models.TextField(blank=True)
    skills = models.JSONField(default=list) # e.g. ["Python", "React"]
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    total_earnings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    completed_projects = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Profile: {self.user.display_name}"

class Project(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', _('Open')
        IN_PROGRESS = 'IN_PROGRESS', _('In Progress')
        COMPLETED = 'COMPLETED', _('Completed')
        CANCELLED = 'CANCELLED', _('Cancelled')

    class BudgetType(models.TextChoices):
        FIXED = 'FIXED', _('Fixed Price')
        HOURLY = 'HOURLY', _('Hourly')

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='posted_projects'
    )
    title = models.CharField(max_length=150)
    description = models.TextField()
    category = models.CharField(max_length=100, blank=True)
    skills = models.JSONField(default=list)

    # Financials
    budget_type = models.CharField(max_length=10, choices=BudgetType.choices, default=BudgetType.FIXED)
    budget_min = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    budget_max = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default='USD')

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.OPEN
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_projects'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.status})"

class Proposal(models.Model):
    class Status(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        ACCEPTED = 'ACCEPTED', _('Accepted')
        REJECTED = 'REJECTED', _('Rejected')
        WITHDRAWN = 'WITHDRAWN', _('Withdrawn')

    class Duration(models.TextChoices):
        LESS_THAN_1_WEEK = 'LESS_THAN_1_WEEK', _('Less than 1 week')
        LESS_THAN_1_MONTH = 'LESS_THAN_1_MONTH', _('Less than 1 month')
        ONE_TO_3_MONTHS = '1_TO_3_MONTHS', _('1 to 3 months')
        THREE_TO_6_MONTHS = '3_TO_6_MONTHS', _('3 to 6 months')
        MORE_THAN_6_MONTHS = 'MORE_THAN_6_MONTHS', _('More than 6 months')

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='proposals')
    freelancer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='proposals'
    )
    cover_letter = models.TextField(max_length=3000)
    bid_amount = models.DecimalField(max_digits=12, decimal_places=2)
    estimated_duration = models.CharField(max_length=20, choices=Duration.choices)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('project', 'freelancer') # One proposal per freelancer per project

    def __str__(self):
        return f"{self.freelancer.display_name} -> {self.project.title}"
