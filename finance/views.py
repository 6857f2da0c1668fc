from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from .models import Wallet
from .serializers import WalletSerializer, DepositSerializer
from .services import WalletService

class WalletDetailView(generics.RetrieveAPIView):
    """
    Get my wallet balance, escrow and history.
    """
    serializer_class = WalletSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        wallet, _ = Wallet.objects.get_or_create(user=self.request.user)
        return wallet

class DepositView(APIView):
    """
    Simulated top-up so clients can fund milestones.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = DepositSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        wallet = WalletService.deposit(request.user, serializer.validated_data['amount'])
        return Response({"message": "Wallet topped up.", "balance": wallet.balance})
