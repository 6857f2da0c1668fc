from django.urls import path
from .views import (
    DisputeListCreateView, MyDisputesView, DisputeDetailView,
    DisputeMessageView, ClaimDisputeView, ResolveDisputeView
)

urlpatterns = [
    path('', DisputeListCreateView.as_view(), name='dispute-list'), # GET (Admin), POST (Raise)
    path('my/', MyDisputesView.as_view(), name='my-disputes'),
    path('<int:pk>/', DisputeDetailView.as_view(), name='dispute-detail'),
    path('<int:pk>/messages/', DisputeMessageView.as_view(), name='dispute-messages'),

    # Admin
    path('<int:pk>/claim/', ClaimDisputeView.as_view(), name='dispute-claim'),
    path('<int:pk>/resolve/', ResolveDisputeView.as_view(), name='dispute-resolve'),
]
