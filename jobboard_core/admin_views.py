from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from rest_framework.response import Response
from rest_framework.views import APIView
from contracts.models import Contract
from disputes.models import Dispute
from finance.models import Wallet
from users.permissions import IsPlatformAdmin

User = get_user_model()

class AdminSystemStatsView(APIView):
    """The 'Big Picture' for the admin dashboard home"""
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        contracts_by_status = dict(
            Contract.objects.order_by().values_list('status').annotate(total=Count('id'))
        )
        total_escrow = Wallet.objects.aggregate(sum=Sum('escrow_balance'))['sum'] or 0

        return Response({
            "users": User.objects.count(),
            "contracts": {status: contracts_by_status.get(status, 0) for status in Contract.Status.values},
            "disputes_awaiting_review": Dispute.objects.filter(status=Dispute.Status.OPEN).count(),
            "disputes_under_review": Dispute.objects.filter(status=Dispute.Status.UNDER_REVIEW).count(),
            "money_in_escrow": total_escrow,
        })
