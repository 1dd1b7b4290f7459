import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.funds.models import Fund
from apps.funds.services import create_allowance, approve_allowance, withdraw_allowance


def allowance_url(name, fund, number):
    return reverse(f'funds:{name}', kwargs={'fund_id': fund.id, 'number': number})


@pytest.fixture
def allowance(funded_fund, benefactor_a, beneficiary):
    """Allowance #1 of 5 to the beneficiary, needing two approvals."""
    return create_allowance(
        fund_id=funded_fund.id,
        amount=Decimal('5.00'),
        beneficiary=beneficiary,
        required_approvals=2,
        caller=benefactor_a,
    )


# =============================================================================
# Fund Tests
# =============================================================================

@pytest.mark.django_db
class TestFundList:
    """Tests for GET /api/funds/"""

    def test_list_returns_benefactor_funds(self, client_for, benefactor_b, fund):
        url = reverse('funds:fund-list')
        response = client_for(benefactor_b).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['results']) == 1
        assert response.data['results'][0]['name'] == fund.name

    def test_list_excludes_other_funds(self, client_for, outsider, fund):
        url = reverse('funds:fund-list')
        response = client_for(outsider).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['results']) == 0

    def test_list_unauthenticated(self, api_client):
        response = api_client.get(reverse('funds:fund-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestFundCreate:
    """Tests for POST /api/funds/"""

    def test_create_fund(self, client_for, benefactor_a, benefactor_b):
        url = reverse('funds:fund-list')
        data = {
            'name': 'Pocket Money',
            'benefactors': [str(benefactor_a.id), str(benefactor_b.id)],
            'maximum_allowance': '25.00',
        }
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['maximum_allowance'] == '25.00'
        assert response.data['balance'] == '0.00'
        assert [b['email'] for b in response.data['benefactors']] == [benefactor_a.email, benefactor_b.email]

        fund = Fund.objects.get(name='Pocket Money')
        assert fund.created_by == benefactor_a

    def test_create_fund_duplicate_benefactor(self, client_for, benefactor_a):
        url = reverse('funds:fund-list')
        data = {
            'name': 'Dup',
            'benefactors': [str(benefactor_a.id), str(benefactor_a.id)],
            'maximum_allowance': '10.00',
        }
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'duplicate_benefactor'

    def test_create_fund_without_benefactors(self, client_for, benefactor_a):
        url = reverse('funds:fund-list')
        data = {'name': 'Empty', 'benefactors': [], 'maximum_allowance': '10.00'}
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'benefactors' in response.data

    def test_create_fund_zero_maximum(self, client_for, benefactor_a):
        url = reverse('funds:fund-list')
        data = {'name': 'Zero', 'benefactors': [str(benefactor_a.id)], 'maximum_allowance': '0'}
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestFundDetail:
    """Tests for GET /api/funds/{id}/ and /benefactors/"""

    def test_retrieve_fund(self, client_for, benefactor_c, funded_fund, allowance):
        url = reverse('funds:fund-detail', kwargs={'pk': funded_fund.id})
        response = client_for(benefactor_c).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == '100.00'
        assert response.data['maximum_allowance'] == '10.00'
        assert response.data['allowances_count'] == 1
        assert response.data['is_benefactor'] is True

    def test_retrieve_fund_non_benefactor(self, client_for, outsider, fund):
        url = reverse('funds:fund-detail', kwargs={'pk': fund.id})
        response = client_for(outsider).get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_benefactors_in_order(self, client_for, benefactor_d, fund, benefactors):
        url = reverse('funds:fund-benefactors', kwargs={'pk': fund.id})
        response = client_for(benefactor_d).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [b['email'] for b in response.data] == [b.email for b in benefactors]


@pytest.mark.django_db
class TestDeposit:
    """Tests for POST /api/funds/{id}/deposit/"""

    def test_deposit(self, client_for, benefactor_b, fund):
        url = reverse('funds:fund-deposit', kwargs={'pk': fund.id})
        response = client_for(benefactor_b).post(url, {'amount': '12.50'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == '12.50'

    def test_deposit_non_benefactor(self, client_for, outsider, fund):
        url = reverse('funds:fund-deposit', kwargs={'pk': fund.id})
        response = client_for(outsider).post(url, {'amount': '12.50'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_benefactor'

        fund.refresh_from_db()
        assert fund.balance == Decimal('0')

    def test_deposit_unknown_fund(self, client_for, benefactor_a):
        url = reverse('funds:fund-deposit', kwargs={'pk': uuid4()})
        response = client_for(benefactor_a).post(url, {'amount': '1.00'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'fund_not_found'

    def test_deposit_invalid_amount(self, client_for, benefactor_a, fund):
        url = reverse('funds:fund-deposit', kwargs={'pk': fund.id})
        response = client_for(benefactor_a).post(url, {'amount': '0'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Allowance Tests
# =============================================================================

@pytest.mark.django_db
class TestAllowanceCreate:
    """Tests for POST /api/funds/{id}/allowances/"""

    def test_create_allowance(self, client_for, benefactor_a, beneficiary, fund):
        url = reverse('funds:fund-allowances', kwargs={'pk': fund.id})
        data = {'amount': '5.00', 'beneficiary': str(beneficiary.id), 'required_approvals': 2}
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['id'] == 1
        assert response.data['total'] == '5.00'
        assert response.data['spent'] == '0.00'
        assert response.data['is_active'] is True
        assert response.data['is_unlocked'] is False
        assert [a['email'] for a in response.data['approvers']] == [benefactor_a.email]

    def test_create_above_maximum(self, client_for, benefactor_a, beneficiary, fund):
        url = reverse('funds:fund-allowances', kwargs={'pk': fund.id})
        data = {'amount': '10.01', 'beneficiary': str(beneficiary.id), 'required_approvals': 1}
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'allowance_exceeds_maximum'

    def test_create_zero_threshold(self, client_for, benefactor_a, beneficiary, fund):
        url = reverse('funds:fund-allowances', kwargs={'pk': fund.id})
        data = {'amount': '5.00', 'beneficiary': str(beneficiary.id), 'required_approvals': 0}
        response = client_for(benefactor_a).post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'required_approvals' in response.data

    def test_create_by_non_benefactor(self, client_for, outsider, beneficiary, fund):
        url = reverse('funds:fund-allowances', kwargs={'pk': fund.id})
        data = {'amount': '5.00', 'beneficiary': str(beneficiary.id), 'required_approvals': 1}
        response = client_for(outsider).post(url, data, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

        fund.refresh_from_db()
        assert fund.allowances_created == 0


@pytest.mark.django_db
class TestAllowanceList:
    """Tests for GET /api/funds/{id}/allowances/"""

    def test_lists_active_by_default(self, client_for, benefactor_a, beneficiary, funded_fund):
        for _ in range(2):
            create_allowance(
                fund_id=funded_fund.id,
                amount=Decimal('2'),
                beneficiary=beneficiary,
                required_approvals=1,
                caller=benefactor_a,
            )
        withdraw_allowance(fund_id=funded_fund.id, number=1, amount=Decimal('2'), caller=beneficiary)

        url = reverse('funds:fund-allowances', kwargs={'pk': funded_fund.id})
        client = client_for(benefactor_a)

        active = client.get(url)
        assert active.status_code == status.HTTP_200_OK
        assert [a['id'] for a in active.data] == [2]

        everything = client.get(url, {'status': 'all'})
        assert [a['id'] for a in everything.data] == [1, 2]

    def test_invalid_status_filter(self, client_for, benefactor_a, fund):
        url = reverse('funds:fund-allowances', kwargs={'pk': fund.id})
        response = client_for(benefactor_a).get(url, {'status': 'frozen'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestAllowanceDetail:
    """Tests for GET /api/funds/{id}/allowances/{n}/"""

    def test_benefactor_can_view(self, client_for, benefactor_d, funded_fund, allowance):
        response = client_for(benefactor_d).get(allowance_url('allowance-detail', funded_fund, 1))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == 1
        assert response.data['required_approvals'] == 2

    def test_beneficiary_can_view(self, client_for, beneficiary, funded_fund, allowance):
        response = client_for(beneficiary).get(allowance_url('allowance-detail', funded_fund, 1))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['beneficiary']['email'] == beneficiary.email

    def test_outsider_cannot_view(self, client_for, outsider, funded_fund, allowance):
        response = client_for(outsider).get(allowance_url('allowance-detail', funded_fund, 1))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_number(self, client_for, benefactor_a, funded_fund):
        response = client_for(benefactor_a).get(allowance_url('allowance-detail', funded_fund, 9))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'allowance_not_found'

    def test_active_flag(self, client_for, benefactor_a, funded_fund, allowance):
        client = client_for(benefactor_a)

        response = client.get(allowance_url('allowance-active', funded_fund, 1))
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'id': 1, 'is_active': True}

        response = client.get(allowance_url('allowance-active', funded_fund, 2))
        assert response.data == {'id': 2, 'is_active': False}

    def test_active_flag_for_beneficiary(self, client_for, beneficiary, funded_fund, allowance):
        response = client_for(beneficiary).get(allowance_url('allowance-active', funded_fund, 1))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_active'] is True

    def test_active_flag_outsider(self, client_for, outsider, funded_fund, allowance):
        response = client_for(outsider).get(allowance_url('allowance-active', funded_fund, 1))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestApprove:
    """Tests for POST /api/funds/{id}/allowances/{n}/approve/"""

    def test_approve_unlocks(self, client_for, benefactor_b, funded_fund, allowance):
        response = client_for(benefactor_b).post(allowance_url('allowance-approve', funded_fund, 1))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_unlocked'] is True
        assert len(response.data['approvers']) == 2

    def test_approve_twice(self, client_for, benefactor_a, funded_fund, allowance):
        response = client_for(benefactor_a).post(allowance_url('allowance-approve', funded_fund, 1))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'already_approved'

    def test_approve_non_benefactor(self, client_for, beneficiary, funded_fund, allowance):
        response = client_for(beneficiary).post(allowance_url('allowance-approve', funded_fund, 1))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_benefactor'


@pytest.mark.django_db
class TestWithdraw:
    """Tests for POST /api/funds/{id}/allowances/{n}/withdraw/"""

    def test_withdraw_before_threshold(self, client_for, beneficiary, funded_fund, allowance):
        url = allowance_url('allowance-withdraw', funded_fund, 1)
        response = client_for(beneficiary).post(url, {'amount': '1.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'threshold_not_met'

    def test_withdraw_success(self, client_for, benefactor_b, beneficiary, funded_fund, allowance, payout_outbox):
        approve_allowance(fund_id=funded_fund.id, number=1, caller=benefactor_b)

        url = allowance_url('allowance-withdraw', funded_fund, 1)
        response = client_for(beneficiary).post(url, {'amount': '3.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['spent'] == '3.00'
        assert response.data['remaining'] == '2.00'
        assert len(payout_outbox) == 1

    def test_withdraw_by_benefactor(self, client_for, benefactor_a, benefactor_b, funded_fund, allowance):
        approve_allowance(fund_id=funded_fund.id, number=1, caller=benefactor_b)

        url = allowance_url('allowance-withdraw', funded_fund, 1)
        response = client_for(benefactor_a).post(url, {'amount': '1.00'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_beneficiary'

    def test_withdraw_more_than_remaining(self, client_for, benefactor_b, beneficiary, funded_fund, allowance):
        approve_allowance(fund_id=funded_fund.id, number=1, caller=benefactor_b)

        url = allowance_url('allowance-withdraw', funded_fund, 1)
        response = client_for(beneficiary).post(url, {'amount': '5.01'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_remaining'


@pytest.mark.django_db
class TestMyAllowances:
    """Tests for GET /api/funds/my_allowances/"""

    def test_my_allowances(self, client_for, beneficiary, funded_fund, allowance):
        response = client_for(beneficiary).get(reverse('funds:fund-my-allowances'))

        assert response.status_code == status.HTTP_200_OK
        assert [a['id'] for a in response.data] == [1]

    def test_my_allowances_empty_for_benefactor(self, client_for, benefactor_a, funded_fund, allowance):
        response = client_for(benefactor_a).get(reverse('funds:fund-my-allowances'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []


@pytest.mark.django_db
class TestHealthCheck:

    def test_health(self, api_client):
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'healthy'
