"""
Management command to print a fund's state.

Shows benefactors, balance and allowances with their approval progress.

Usage:
    python manage.py fund_report <fund_id>
    python manage.py fund_report <fund_id> --all
"""

import uuid

from django.core.management.base import BaseCommand, CommandError

from apps.funds.services import (
    get_fund_by_id,
    get_active_allowances,
    get_all_allowances,
    FundNotFoundError,
)


class Command(BaseCommand):
    help = 'Print benefactors, balance and allowances of a fund'

    def add_arguments(self, parser):
        parser.add_argument('fund_id', type=uuid.UUID, help='UUID of the fund')
        parser.add_argument(
            '--all',
            action='store_true',
            help='Include archived (exhausted) allowances',
        )

    def handle(self, *args, **options):
        try:
            fund = get_fund_by_id(fund_id=options['fund_id'])
        except FundNotFoundError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.MIGRATE_HEADING(f'Fund: {fund.name} ({fund.id})'))
        self.stdout.write(f'Balance: {fund.balance}')
        self.stdout.write(f'Maximum allowance: {fund.maximum_allowance}')

        self.stdout.write('\nBenefactors:')
        for benefactor in fund.get_benefactors():
            self.stdout.write(f'  - {benefactor.email}')

        if options['all']:
            allowances = get_all_allowances(fund_id=fund.id)
        else:
            allowances = get_active_allowances(fund_id=fund.id)

        if not allowances:
            self.stdout.write(self.style.WARNING('\nNo allowances to show.'))
            return

        self.stdout.write('\nAllowances:')
        for allowance in allowances:
            state = 'active' if allowance.is_active else 'archived'
            unlocked = 'unlocked' if allowance.is_unlocked else 'locked'
            self.stdout.write(
                f'  #{allowance.number} | {allowance.spent}/{allowance.total} | '
                f'to {allowance.beneficiary.email} | '
                f'approvals {allowance.approval_count}/{allowance.required_approvals} '
                f'({unlocked}) | {state}'
            )
