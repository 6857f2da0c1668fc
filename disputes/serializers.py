from rest_framework import serializers
from users.serializers import UserSummarySerializer
from .models import Dispute, DisputeMessage

class AttachmentSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    url = serializers.URLField()

class DisputeMessageSerializer(serializers.ModelSerializer):
    sender_id = serializers.ReadOnlyField(source='sender.id')
    sender_name = serializers.ReadOnlyField(source='sender.full_name')

    class Meta:
        model = DisputeMessage
        fields = ['id', 'sender_id', 'sender_name', 'message', 'attachments', 'created_at']

class DisputeSerializer(serializers.ModelSerializer):
    initiator = UserSummarySerializer(read_only=True)
    defendant = UserSummarySerializer(read_only=True)
    contract_title = serializers.CharField(source='contract.title', read_only=True)
    contract_status = serializers.CharField(source='contract.status', read_only=True)
    messages = DisputeMessageSerializer(many=True, read_only=True)

    class Meta:
        model = Dispute
        fields = [
            'id', 'contract', 'contract_title', 'contract_status', 'initiator', 'defendant',
            'reason', 'evidence', 'status', 'assigned_admin', 'claimed_at',
            'final_decision', 'decided_by', 'decided_at', 'messages', 'created_at'
        ]
        read_only_fields = fields

class RaiseDisputeSerializer(serializers.Serializer):
    contract = serializers.IntegerField()
    reason = serializers.CharField(max_length=2000)
    evidence = AttachmentSerializer(many=True, required=False)

class DisputeMessageInputSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=5000)
    attachments = AttachmentSerializer(many=True, required=False)

class ResolveDisputeSerializer(serializers.Serializer):
    outcome = serializers.ChoiceField(choices=list(Dispute.OUTCOMES))
    decision = serializers.CharField(max_length=5000, required=False, allow_blank=True)
