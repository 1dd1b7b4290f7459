import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.funds import signals
from apps.funds.payouts import LocmemPayoutBackend
from apps.funds.services import create_fund, deposit


SIGNAL_NAMES = [
    'allowance_created',
    'allowance_approved',
    'allowance_unlocked',
    'allowance_consumed',
    'allowance_exhausted',
    'funds_deposited',
]


@pytest.fixture(autouse=True)
def clear_payout_outbox():
    """Start every test with an empty payout outbox."""
    LocmemPayoutBackend.outbox.clear()
    yield
    LocmemPayoutBackend.outbox.clear()


def _make_user(email, display_name):
    return User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=display_name,
    )


@pytest.fixture
def benefactor_a(db):
    return _make_user('alice@example.com', 'Alice')


@pytest.fixture
def benefactor_b(db):
    return _make_user('bob@example.com', 'Bob')


@pytest.fixture
def benefactor_c(db):
    return _make_user('carol@example.com', 'Carol')


@pytest.fixture
def benefactor_d(db):
    return _make_user('dave@example.com', 'Dave')


@pytest.fixture
def beneficiary(db):
    """The allowance recipient (X)."""
    return _make_user('xavier@example.com', 'Xavier')


@pytest.fixture
def outsider(db):
    """A user with no role in any fund (E)."""
    return _make_user('eve@example.com', 'Eve')


@pytest.fixture
def benefactors(benefactor_a, benefactor_b, benefactor_c, benefactor_d):
    return [benefactor_a, benefactor_b, benefactor_c, benefactor_d]


@pytest.fixture
def fund(benefactors):
    """Fund with four benefactors and a cap of 10, no deposits yet."""
    return create_fund(
        name='Household',
        benefactors=benefactors,
        maximum_allowance=Decimal('10.00'),
        created_by=benefactors[0],
    )


@pytest.fixture
def funded_fund(fund, benefactor_a):
    """Fund holding a balance of 100."""
    return deposit(fund_id=fund.id, caller=benefactor_a, amount=Decimal('100.00'))


@pytest.fixture
def payout_outbox():
    return LocmemPayoutBackend.outbox


@pytest.fixture
def received_signals():
    """
    Record every funds notification as (name, kwargs).

    On-commit callbacks only run when the test executes them, e.g. with
    django_capture_on_commit_callbacks(execute=True).
    """
    events = []
    connections = []

    for name in SIGNAL_NAMES:
        signal = getattr(signals, name)

        def handler(sender, _name=name, **kwargs):
            kwargs.pop('signal', None)
            events.append((_name, kwargs))

        signal.connect(handler, weak=False)
        connections.append((signal, handler))

    yield events

    for signal, handler in connections:
        signal.disconnect(handler)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Factory returning an API client authenticated as the given user."""
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for
