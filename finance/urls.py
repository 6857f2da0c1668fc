from django.urls import path
from .views import WalletDetailView, DepositView

urlpatterns = [
    path('wallet/', WalletDetailView.as_view(), name='wallet-detail'),
    path('wallet/deposit/', DepositView.as_view(), name='wallet-deposit'),
]
