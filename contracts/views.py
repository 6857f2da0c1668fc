from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.db.models import Q
from jobboard_core.exceptions import Forbidden, NotFound
from .models import Contract, Milestone
from .serializers import (
    ContractSerializer, ContractCreateSerializer, MilestoneSerializer, MilestoneInputSerializer,
    MilestoneEventSerializer, SubmitMilestoneSerializer, RejectMilestoneSerializer
)
from .services import ContractService, MilestoneLedger

# --- CONTRACTS ---

class ContractListCreateView(APIView):
    """
    GET: Contracts where I am the client or the freelancer.
    POST: Client turns an accepted proposal into a contract.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        contracts = Contract.objects.filter(
            Q(client=request.user) | Q(freelancer=request.user)
        ).select_related('client', 'freelancer').prefetch_related('milestones')
        return Response(ContractSerializer(contracts, many=True).data)

    def post(self, request):
        serializer = ContractCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        contract = ContractService.create_from_proposal(
            serializer.validated_data['proposal'],
            request.user,
            milestones=serializer.validated_data.get('milestones'),
        )
        return Response(ContractSerializer(contract).data, status=status.HTTP_201_CREATED)

class ContractDetailView(generics.RetrieveAPIView):
    """
    Parties and platform admins only.
    """
    serializer_class = ContractSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        try:
            contract = Contract.objects.get(pk=self.kwargs['pk'])
        except Contract.DoesNotExist:
            raise NotFound("Contract not found.")
        if not (contract.is_party(self.request.user) or self.request.user.is_platform_admin):
            raise Forbidden("You are not a party to this contract.")
        return contract

class CancelContractView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        contract = ContractService.cancel(pk, request.user)
        return Response(ContractSerializer(contract).data)

# --- MILESTONES ---

class AddMilestoneView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        serializer = MilestoneInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        milestone = ContractService.add_milestone(pk, request.user, **serializer.validated_data)
        return Response(MilestoneSerializer(milestone).data, status=status.HTTP_201_CREATED)

class MilestoneActionView(APIView):
    """
    Base for the fund/submit/approve/reject endpoints.
    Every action answers with the updated contract aggregate.
    """
    permission_classes = [permissions.IsAuthenticated]

    def perform_action(self, request, contract_id, milestone_id):
        raise NotImplementedError

    def post(self, request, pk, milestone_id):
        contract, _ = self.perform_action(request, pk, milestone_id)
        contract.refresh_from_db()
        return Response(ContractSerializer(contract).data)

class FundMilestoneView(MilestoneActionView):
    def perform_action(self, request, contract_id, milestone_id):
        return MilestoneLedger.fund(contract_id, milestone_id, request.user)

class SubmitMilestoneView(MilestoneActionView):
    def perform_action(self, request, contract_id, milestone_id):
        serializer = SubmitMilestoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return MilestoneLedger.submit(
            contract_id, milestone_id, request.user,
            deliverables=serializer.validated_data.get('deliverables'),
        )

class ApproveMilestoneView(MilestoneActionView):
    def perform_action(self, request, contract_id, milestone_id):
        return MilestoneLedger.approve(contract_id, milestone_id, request.user)

class RejectMilestoneView(MilestoneActionView):
    def perform_action(self, request, contract_id, milestone_id):
        serializer = RejectMilestoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return MilestoneLedger.reject(
            contract_id, milestone_id, request.user, serializer.validated_data['reason'],
        )

class MilestoneHistoryView(generics.ListAPIView):
    """
    Audit trail of a milestone, including every rejection reason.
    """
    serializer_class = MilestoneEventSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        try:
            contract = Contract.objects.get(pk=self.kwargs['pk'])
            milestone = contract.milestones.get(pk=self.kwargs['milestone_id'])
        except (Contract.DoesNotExist, Milestone.DoesNotExist):
            raise NotFound("Milestone not found.")
        if not (contract.is_party(self.request.user) or self.request.user.is_platform_admin):
            raise Forbidden("You are not a party to this contract.")
        return milestone.events.all()
