"""
Shared fixtures: a client, a freelancer, an administrator and a contract
built through the real proposal flow.
"""
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from contracts.services import ContractService
from finance.services import WalletService
from notifications.realtime import registry
from projects.models import Project, Proposal
from projects.services import ProposalService

User = get_user_model()


def make_user(email, role='client', **extra):
    return User.objects.create_user(
        email=email,
        username=email,
        full_name=email.split('@')[0].title(),
        password='pass-1234-word',
        roles=[role],
        active_role=role,
        **extra
    )


@pytest.fixture(autouse=True)
def clean_registry():
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def client_user(db):
    user = make_user('client@example.com', 'client')
    WalletService.deposit(user, Decimal('5000.00'))
    return user


@pytest.fixture
def freelancer(db):
    return make_user('freelancer@example.com', 'freelancer')


@pytest.fixture
def outsider(db):
    return make_user('outsider@example.com', 'freelancer')


@pytest.fixture
def admin_user(db):
    return make_user('admin@example.com', 'client', is_staff=True)


@pytest.fixture
def other_admin(db):
    return make_user('admin2@example.com', 'client', is_staff=True)


@pytest.fixture
def project(client_user):
    return Project.objects.create(
        client=client_user,
        title='Bilingual landing page',
        description='Arabic and English marketing site',
        budget_min=Decimal('800.00'),
        budget_max=Decimal('1200.00'),
    )


@pytest.fixture
def accepted_proposal(project, freelancer, client_user):
    proposal = ProposalService.submit(
        project.id, freelancer,
        cover_letter='I have built several RTL sites.',
        bid_amount=Decimal('1000.00'),
        estimated_duration=Proposal.Duration.LESS_THAN_1_MONTH,
    )
    return ProposalService.decide(proposal.id, client_user, Proposal.Status.ACCEPTED)


@pytest.fixture
def contract(accepted_proposal, client_user):
    """Two milestones of 500 each."""
    return ContractService.create_from_proposal(
        accepted_proposal.id,
        client_user,
        milestones=[
            {'title': 'Design', 'amount': Decimal('500.00')},
            {'title': 'Build', 'amount': Decimal('500.00')},
        ],
    )


@pytest.fixture
def milestones(contract):
    return list(contract.milestones.order_by('position'))


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def as_user(api):
    def _login(user):
        api.force_authenticate(user=user)
        return api
    return _login
