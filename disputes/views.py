from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.db.models import Q
from jobboard_core.exceptions import Forbidden, NotFound
from users.permissions import IsPlatformAdmin
from .models import Dispute
from .serializers import (
    DisputeSerializer, DisputeMessageSerializer, RaiseDisputeSerializer,
    DisputeMessageInputSerializer, ResolveDisputeSerializer
)
from .services import DisputeService

class DisputeListCreateView(APIView):
    """
    GET: Admin queue of every dispute (optional ?status=OPEN).
    POST: A contract party raises a dispute.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        if not request.user.is_platform_admin:
            raise Forbidden("Only platform administrators can list all disputes.")
        disputes = Dispute.objects.select_related('contract', 'initiator', 'defendant')
        status_filter = request.query_params.get('status')
        if status_filter:
            disputes = disputes.filter(status=status_filter)
        return Response(DisputeSerializer(disputes, many=True).data)

    def post(self, request):
        serializer = RaiseDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = DisputeService.raise_dispute(
            serializer.validated_data['contract'],
            request.user,
            serializer.validated_data['reason'],
            evidence=serializer.validated_data.get('evidence'),
        )
        return Response(DisputeSerializer(dispute).data, status=status.HTTP_201_CREATED)

class MyDisputesView(generics.ListAPIView):
    serializer_class = DisputeSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Dispute.objects.filter(Q(initiator=user) | Q(defendant=user))

class DisputeDetailView(generics.RetrieveAPIView):
    """
    Initiator, defendant or admin.
    """
    serializer_class = DisputeSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        try:
            dispute = Dispute.objects.get(pk=self.kwargs['pk'])
        except Dispute.DoesNotExist:
            raise NotFound("Dispute not found.")
        if not (dispute.involves(self.request.user) or self.request.user.is_platform_admin):
            raise Forbidden("You are not authorized to view this dispute.")
        return dispute

class DisputeMessageView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        serializer = DisputeMessageInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = DisputeService.add_message(
            pk, request.user,
            serializer.validated_data['message'],
            attachments=serializer.validated_data.get('attachments'),
        )
        return Response(DisputeMessageSerializer(message).data, status=status.HTTP_201_CREATED)

# --- ADMIN MEDIATION ---

class ClaimDisputeView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        dispute = DisputeService.claim(pk, request.user)
        return Response(DisputeSerializer(dispute).data)

class ResolveDisputeView(APIView):
    """
    PATCH { "outcome": "RESOLVED" | "REJECTED", "decision": "..." }
    """
    permission_classes = [IsPlatformAdmin]

    def patch(self, request, pk):
        serializer = ResolveDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = DisputeService.resolve(
            pk, request.user,
            serializer.validated_data['outcome'],
            decision=serializer.validated_data.get('decision', ''),
        )
        return Response(DisputeSerializer(dispute).data)
