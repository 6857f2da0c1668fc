import logging
from decimal import Decimal
from django.db import transaction
from jobboard_core.exceptions import InsufficientFunds
from .models import Wallet, Transaction

logger = logging.getLogger(__name__)


class WalletService:
    """
    Service layer for internal wallet movements (Escrow, Payments, Refunds).
    Ensures all movements are atomic and recorded in the ledger.
    Callers already hold the contract row lock; the wallet rows are locked here.
    """

    @classmethod
    def _locked_wallet(cls, user):
        wallet, _ = Wallet.objects.select_for_update().get_or_create(user=user)
        return wallet

    @classmethod
    def _locked_wallets(cls, *users):
        """
        Lock several wallets with one query in primary key order, whatever
        role each user plays on the contract at hand.
        Returned in the order the users were given.
        """
        for user in users:
            Wallet.objects.get_or_create(user=user)
        wallets = Wallet.objects.select_for_update().filter(user__in=users).order_by('pk')
        by_user = {wallet.user_id: wallet for wallet in wallets}
        return [by_user[user.pk] for user in users]

    @classmethod
    @transaction.atomic
    def deposit(cls, user, amount, description="Wallet top-up"):
        """
        Simulated top-up; a payment gateway would call this after verification.
        """
        amount = Decimal(str(amount))
        wallet = cls._locked_wallet(user)
        wallet.balance += amount
        wallet.save()

        Transaction.objects.create(
            wallet=wallet, amount=amount,
            transaction_type=Transaction.TransactionType.DEPOSIT,
            status=Transaction.Status.SUCCESS, description=description
        )
        return wallet

    @classmethod
    @transaction.atomic
    def lock_funds_for_milestone(cls, milestone):
        """
        Moves the milestone amount from the client's balance to escrow.
        """
        contract = milestone.contract
        client_wallet = cls._locked_wallet(contract.client)

        if client_wallet.balance < milestone.amount:
            raise InsufficientFunds(
                f"Funding this milestone needs {milestone.amount} but the available balance is {client_wallet.balance}."
            )

        client_wallet.balance -= milestone.amount
        client_wallet.escrow_balance += milestone.amount
        client_wallet.save()

        Transaction.objects.create(
            wallet=client_wallet,
            amount=-milestone.amount,
            transaction_type=Transaction.TransactionType.ESCROW_LOCK,
            status=Transaction.Status.SUCCESS,
            related_contract_id=str(contract.id),
            related_milestone_id=str(milestone.id),
            description=f"Escrow lock for milestone '{milestone.title}'"
        )
        logger.info("Locked %s in escrow for milestone %s", milestone.amount, milestone.id)
        return client_wallet

    @classmethod
    @transaction.atomic
    def release_milestone_escrow(cls, milestone):
        """
        Atomic release:
        1. Debit Client Escrow.
        2. Credit Freelancer balance with the full milestone amount.
        """
        contract = milestone.contract
        client_wallet, freelancer_wallet = cls._locked_wallets(contract.client, contract.freelancer)

        client_wallet.escrow_balance -= milestone.amount
        client_wallet.save()

        freelancer_wallet.balance += milestone.amount
        freelancer_wallet.save()

        # Audit Trail
        Transaction.objects.create(
            wallet=client_wallet, amount=-milestone.amount,
            transaction_type=Transaction.TransactionType.ESCROW_RELEASE,
            status=Transaction.Status.SUCCESS,
            related_contract_id=str(contract.id), related_milestone_id=str(milestone.id),
            description=f"Payment released: {milestone.title}"
        )
        Transaction.objects.create(
            wallet=freelancer_wallet, amount=milestone.amount,
            transaction_type=Transaction.TransactionType.PAYMENT,
            status=Transaction.Status.SUCCESS,
            related_contract_id=str(contract.id), related_milestone_id=str(milestone.id),
            description=f"Earnings: {milestone.title}"
        )
        logger.info("Released %s from escrow to freelancer for milestone %s", milestone.amount, milestone.id)
        return freelancer_wallet

    @classmethod
    @transaction.atomic
    def refund_milestone_escrow(cls, milestone, reason="Refund"):
        """
        Returns funds from Escrow to the client's balance.
        Called on milestone rejection and contract cancellation.
        """
        contract = milestone.contract
        client_wallet = cls._locked_wallet(contract.client)

        client_wallet.escrow_balance -= milestone.amount
        client_wallet.balance += milestone.amount
        client_wallet.save()

        Transaction.objects.create(
            wallet=client_wallet,
            amount=milestone.amount,
            transaction_type=Transaction.TransactionType.REFUND,
            status=Transaction.Status.SUCCESS,
            related_contract_id=str(contract.id),
            related_milestone_id=str(milestone.id),
            description=f"{reason}: {milestone.title}"
        )
        logger.info("Refunded %s escrow for milestone %s", milestone.amount, milestone.id)
        return client_wallet
