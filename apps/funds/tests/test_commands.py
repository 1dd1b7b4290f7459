import pytest
from decimal import Decimal
from io import StringIO
from uuid import uuid4
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.funds.services import create_allowance, withdraw_allowance


@pytest.mark.django_db
class TestFundReport:
    """Tests for the fund_report management command."""

    @pytest.fixture
    def populated_fund(self, funded_fund, benefactor_a, beneficiary):
        for amount in (Decimal('2.00'), Decimal('4.00')):
            create_allowance(
                fund_id=funded_fund.id,
                amount=amount,
                beneficiary=beneficiary,
                required_approvals=1,
                caller=benefactor_a,
            )
        withdraw_allowance(fund_id=funded_fund.id, number=1, amount=Decimal('2.00'), caller=beneficiary)
        return funded_fund

    def test_report_active_allowances(self, populated_fund, benefactors):
        out = StringIO()
        call_command('fund_report', str(populated_fund.id), stdout=out)
        output = out.getvalue()

        assert 'Balance: 98.00' in output
        for benefactor in benefactors:
            assert benefactor.email in output
        assert '#2 | 0.00/4.00' in output
        assert '#1 |' not in output

    def test_report_all_allowances(self, populated_fund):
        out = StringIO()
        call_command('fund_report', str(populated_fund.id), '--all', stdout=out)
        output = out.getvalue()

        assert '#1 | 2.00/2.00' in output
        assert 'archived' in output

    def test_report_unknown_fund(self):
        with pytest.raises(CommandError):
            call_command('fund_report', str(uuid4()), stdout=StringIO())
