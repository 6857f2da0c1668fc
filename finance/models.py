from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _
import uuid
from decimal import Decimal

class Wallet(models.Model):
    """
    The digital wallet for every user.
    Holds their available balance and funds currently locked in milestone escrow.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wallet'
    )
    currency = models.CharField(max_length=3, default='USD')

    # Funds that can be withdrawn or used immediately
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Funds locked in funded milestones (Escrow)
    escrow_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.display_name}'s Wallet ({self.currency})"

    @property
    def total_assets(self):
        return self.balance + self.escrow_balance

class Transaction(models.Model):
    """
    An immutable record of every financial movement.
    """
    class TransactionType(models.TextChoices):
        DEPOSIT = 'deposit', _('Deposit (Top-up)')
        ESCROW_LOCK = 'escrow_lock', _('Locked in Escrow')
        ESCROW_RELEASE = 'escrow_release', _('Released from Escrow')
        PAYMENT = 'payment', _('Milestone Earnings')
        REFUND = 'refund', _('Refund')

    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        SUCCESS = 'success', _('Success')
        FAILED = 'failed', _('Failed')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, related_name='transactions')

    # Amount can be positive (credit) or negative (debit)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    description = models.CharField(max_length=255, blank=True)

    related_contract_id = models.CharField(max_length=50, blank=True, null=True)
    related_milestone_id = models.CharField(max_length=50, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_type} - {self.amount}"
