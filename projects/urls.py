from django.urls import path
from .views import (
    ProjectListView, ProjectDetailView, FreelancerProfileView,
    SubmitProposalView, MyProposalsView, WithdrawProposalView,
    ProjectProposalsView, DecideProposalView
)

urlpatterns = [
    # Public & Client
    path('', ProjectListView.as_view(), name='project-list'), # GET (Open), POST (Create)
    path('<int:pk>/', ProjectDetailView.as_view(), name='project-detail'),

    # Freelancer
    path('freelancer/profile/', FreelancerProfileView.as_view(), name='freelancer-profile'),
    path('<int:project_id>/proposals/submit/', SubmitProposalView.as_view(), name='proposal-submit'),
    path('proposals/mine/', MyProposalsView.as_view(), name='my-proposals'),
    path('proposals/<int:pk>/withdraw/', WithdrawProposalView.as_view(), name='proposal-withdraw'),

    # Client Management
    path('<int:project_id>/proposals/', ProjectProposalsView.as_view(), name='project-proposals'),
    path('proposals/<int:pk>/status/', DecideProposalView.as_view(), name='proposal-decide'),
]
