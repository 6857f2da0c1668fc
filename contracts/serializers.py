from decimal import Decimal
from rest_framework import serializers
from users.serializers import UserSummarySerializer
from .models import Contract, Milestone, MilestoneEvent

class MilestoneEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = MilestoneEvent
        fields = ['from_status', 'to_status', 'actor', 'note', 'created_at']

class MilestoneSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))

    class Meta:
        model = Milestone
        fields = [
            'id', 'position', 'title', 'description', 'amount', 'due_date', 'status',
            'deliverables', 'revision_count', 'rejection_reason',
            'funded_at', 'submitted_at', 'approved_at', 'paid_at', 'refunded_at'
        ]
        read_only_fields = [
            'id', 'position', 'status', 'deliverables', 'revision_count', 'rejection_reason',
            'funded_at', 'submitted_at', 'approved_at', 'paid_at', 'refunded_at'
        ]

class MilestoneInputSerializer(serializers.Serializer):
    """
    Milestone fields a client may set when creating a contract or adding one.
    """
    title = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    due_date = serializers.DateField(required=False, allow_null=True)

class ContractSerializer(serializers.ModelSerializer):
    client = UserSummarySerializer(read_only=True)
    freelancer = UserSummarySerializer(read_only=True)
    milestones = MilestoneSerializer(many=True, read_only=True)

    class Meta:
        model = Contract
        fields = [
            'id', 'project', 'proposal', 'client', 'freelancer', 'title', 'description',
            'total_amount', 'status', 'progress', 'milestones', 'start_date', 'end_date'
        ]
        read_only_fields = fields

class ContractCreateSerializer(serializers.Serializer):
    proposal = serializers.IntegerField()
    milestones = MilestoneInputSerializer(many=True, required=False)

class DeliverableSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    url = serializers.URLField()

class SubmitMilestoneSerializer(serializers.Serializer):
    deliverables = DeliverableSerializer(many=True, required=False)

class RejectMilestoneSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000)
