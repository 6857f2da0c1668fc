from decimal import Decimal
from rest_framework import serializers
from .models import FreelancerProfile, Project, Proposal

class FreelancerProfileSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.full_name', read_only=True)

    class Meta:
        model = FreelancerProfile
        fields = ['user_name', 'title', 'bio', 'skills', 'hourly_rate', 'total_earnings', 'completed_projects']
        read_only_fields = ['total_earnings', 'completed_projects']

class ProposalSerializer(serializers.ModelSerializer):
    freelancer_name = serializers.CharField(source='freelancer.full_name', read_only=True)
    project_title = serializers.CharField(source='project.title', read_only=True)
    bid_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('1.00'))

    class Meta:
        model = Proposal
        fields = [
            'id', 'project', 'project_title', 'freelancer', 'freelancer_name',
            'cover_letter', 'bid_amount', 'estimated_duration', 'status', 'created_at'
        ]
        read_only_fields = ['project', 'freelancer', 'status', 'created_at']

class ProposalDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[Proposal.Status.ACCEPTED, Proposal.Status.REJECTED])

class ProjectSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.full_name', read_only=True)
    proposal_count = serializers.IntegerField(source='proposals.count', read_only=True)

    class Meta:
        model = Project
        fields = [
            'id', 'client', 'client_name', 'title', 'description', 'category', 'skills',
            'budget_type', 'budget_min', 'budget_max', 'currency',
            'status', 'assigned_to', 'proposal_count', 'created_at'
        ]
        read_only_fields = ['client', 'status', 'assigned_to', 'proposal_count']

    def validate(self, data):
        low, high = data.get('budget_min'), data.get('budget_max')
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError("budget_min cannot exceed budget_max.")
        return data
