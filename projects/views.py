from rest_framework import generics, permissions, status, filters
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from .models import Project, Proposal, FreelancerProfile
from .serializers import (
    ProjectSerializer, ProposalSerializer, ProposalDecisionSerializer, FreelancerProfileSerializer
)
from .services import ProposalService

# --- PUBLIC / FREELANCER PROJECT SEARCH ---

class ProjectListView(generics.ListCreateAPIView):
    """
    GET: Public list of open projects.
    POST: Client posts a new project.
    """
    queryset = Project.objects.filter(status=Project.Status.OPEN).order_by('-created_at')
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'description', 'category']

    def perform_create(self, serializer):
        serializer.save(client=self.request.user)

class ProjectDetailView(generics.RetrieveUpdateAPIView):
    """
    GET: View project details.
    PUT/PATCH: Only the Client who posted it.
    """
    queryset = Project.objects.all()
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def perform_update(self, serializer):
        if self.get_object().client != self.request.user:
            raise PermissionDenied("You cannot edit this project.")
        serializer.save()

# --- FREELANCER ACTIONS ---

class FreelancerProfileView(generics.RetrieveUpdateAPIView):
    """
    Manage your freelancer profile.
    """
    serializer_class = FreelancerProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        # Get or create profile for current user
        obj, created = FreelancerProfile.objects.get_or_create(user=self.request.user)
        return obj

class SubmitProposalView(APIView):
    """
    Bid on a specific project ID.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, project_id):
        serializer = ProposalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        proposal = ProposalService.submit(project_id, request.user, **serializer.validated_data)
        return Response(ProposalSerializer(proposal).data, status=status.HTTP_201_CREATED)

class MyProposalsView(generics.ListAPIView):
    serializer_class = ProposalSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Proposal.objects.filter(freelancer=self.request.user).order_by('-created_at')

class WithdrawProposalView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        proposal = ProposalService.withdraw(pk, request.user)
        return Response(ProposalSerializer(proposal).data)

# --- CLIENT DASHBOARD ---

class ProjectProposalsView(generics.ListAPIView):
    """
    View all proposals for one of MY projects.
    """
    serializer_class = ProposalSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        project = get_object_or_404(Project, pk=self.kwargs['project_id'])
        if project.client != self.request.user:
            raise PermissionDenied("Only the project owner can view its proposals.")
        return project.proposals.order_by('-created_at')

class DecideProposalView(APIView):
    """
    Accept or reject a proposal: PUT { "status": "ACCEPTED" }
    """
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, pk):
        serializer = ProposalDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        proposal = ProposalService.decide(pk, request.user, serializer.validated_data['status'])
        return Response(ProposalSerializer(proposal).data)
