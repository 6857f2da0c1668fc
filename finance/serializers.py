from decimal import Decimal
from rest_framework import serializers
from .models import Wallet, Transaction

class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = [
            'id', 'amount', 'transaction_type', 'status', 'description',
            'related_contract_id', 'related_milestone_id', 'created_at'
        ]

class WalletSerializer(serializers.ModelSerializer):
    transactions = serializers.SerializerMethodField()

    class Meta:
        model = Wallet
        fields = ['currency', 'balance', 'escrow_balance', 'total_assets', 'transactions']

    def get_transactions(self, obj):
        return TransactionSerializer(obj.transactions.all()[:50], many=True).data

class DepositSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
