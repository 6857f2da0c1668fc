from django.urls import path
from .views import (
    ContractListCreateView, ContractDetailView, CancelContractView, AddMilestoneView,
    FundMilestoneView, SubmitMilestoneView, ApproveMilestoneView, RejectMilestoneView,
    MilestoneHistoryView
)

urlpatterns = [
    # Contracts
    path('', ContractListCreateView.as_view(), name='contract-list'), # GET (Mine), POST (From proposal)
    path('<int:pk>/', ContractDetailView.as_view(), name='contract-detail'),
    path('<int:pk>/cancel/', CancelContractView.as_view(), name='contract-cancel'),

    # Milestones
    path('<int:pk>/milestones/', AddMilestoneView.as_view(), name='milestone-add'),
    path('<int:pk>/milestones/<int:milestone_id>/fund/', FundMilestoneView.as_view(), name='milestone-fund'),
    path('<int:pk>/milestones/<int:milestone_id>/submit/', SubmitMilestoneView.as_view(), name='milestone-submit'),
    path('<int:pk>/milestones/<int:milestone_id>/approve/', ApproveMilestoneView.as_view(), name='milestone-approve'),
    path('<int:pk>/milestones/<int:milestone_id>/reject/', RejectMilestoneView.as_view(), name='milestone-reject'),
    path('<int:pk>/milestones/<int:milestone_id>/history/', MilestoneHistoryView.as_view(), name='milestone-history'),
]
