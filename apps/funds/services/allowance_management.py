"""
Allowance management service.

Owns allowance creation, lookups and the fund's active working set.
Allowances are identified within their fund by a sequential number that
starts at 1 and is never reused. An allowance stays in the active set while
spent < total and is archived (never deleted) once it is exhausted.
"""

import logging
from decimal import Decimal
from typing import List
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.funds.models import Allowance, Approval
from apps.funds.signals import allowance_created, allowance_unlocked

from .exceptions import (
    NotBenefactorError,
    MissingBeneficiaryError,
    InvalidAmountError,
    InvalidThresholdError,
    AllowanceExceedsMaximumError,
    AllowanceNotFoundError,
    AllowanceNotActiveError,
)
from .amounts import is_valid_amount
from .fund_management import get_fund_by_id, lock_fund
from .notifications import notify_on_commit, allowance_payload

logger = logging.getLogger(__name__)


@transaction.atomic
def create_allowance(
    *,
    fund_id: UUID,
    amount: Decimal,
    beneficiary: User,
    required_approvals: int,
    caller: User
) -> Allowance:
    """
    Create an allowance and add it to the fund's active set.

    The creator is recorded as the first approver. The fund row is locked
    while the next number is assigned, so a rejected creation never consumes
    a number.

    Args:
        fund_id: UUID of the fund
        amount: Total the beneficiary may withdraw over time
        beneficiary: Sole user allowed to withdraw
        required_approvals: Distinct benefactor approvals needed to withdraw
        caller: Benefactor creating the allowance

    Returns:
        Created Allowance instance

    Raises:
        FundNotFoundError: If fund doesn't exist
        NotBenefactorError: If caller is not a benefactor
        MissingBeneficiaryError: If beneficiary is None
        InvalidAmountError: If amount is not positive or has more than
            two decimal places
        AllowanceExceedsMaximumError: If amount exceeds the fund's cap
        InvalidThresholdError: If required_approvals is below one

    Note:
        A threshold below one is rejected on purpose: the creator's own
        approval counts, so a threshold of zero would leave an allowance
        that is unlocked without any vote. A threshold above the number of
        benefactors is accepted; such an allowance can never be unlocked.
    """
    fund = lock_fund(fund_id)

    if not fund.is_benefactor(caller):
        logger.warning("Rejected allowance creation in fund %s by non-benefactor %s", fund.id, caller)
        raise NotBenefactorError("Only benefactors can create allowances")

    if beneficiary is None:
        raise MissingBeneficiaryError("Allowance must have a beneficiary")

    if not is_valid_amount(amount):
        raise InvalidAmountError("Allowance amount must be greater than zero with at most two decimal places")

    if amount > fund.maximum_allowance:
        raise AllowanceExceedsMaximumError(
            f"Allowance amount {amount} exceeds maximum allowance {fund.maximum_allowance}"
        )

    if required_approvals is None or required_approvals < 1:
        raise InvalidThresholdError("Required approvals must be at least 1")

    fund.allowances_created += 1
    fund.save(update_fields=['allowances_created', 'updated_at'])

    allowance = Allowance.objects.create(
        fund=fund,
        number=fund.allowances_created,
        total=amount,
        beneficiary=beneficiary,
        required_approvals=required_approvals,
        created_by=caller,
    )
    Approval.objects.create(allowance=allowance, approver=caller, position=0)

    payload = allowance_payload(allowance)
    notify_on_commit(
        allowance_created,
        sender=Allowance,
        amount=amount,
        required_approvals=required_approvals,
        **payload,
    )
    # The creator's own approval already meets a threshold of one
    if required_approvals == 1:
        notify_on_commit(allowance_unlocked, sender=Allowance, **payload)

    logger.info(
        "Allowance #%s created in fund %s: %s to %s, %s approvals required",
        allowance.number, fund.id, amount, beneficiary, required_approvals,
    )
    return allowance


def get_allowance(*, fund_id: UUID, number: int) -> Allowance:
    """
    Get an allowance by its number, whether active or archived.

    Raises:
        FundNotFoundError: If fund doesn't exist
        AllowanceNotFoundError: If no allowance with this number was created
    """
    fund = get_fund_by_id(fund_id=fund_id)
    try:
        return (
            Allowance.objects
            .select_related('fund', 'beneficiary', 'created_by')
            .prefetch_related('approvals__approver')
            .get(fund=fund, number=number)
        )
    except Allowance.DoesNotExist:
        raise AllowanceNotFoundError(f"Allowance #{number} not found in fund {fund_id}")


def lock_allowance(fund_id: UUID, number: int) -> Allowance:
    """Fetch an allowance with a row lock. Must run inside a transaction."""
    try:
        return (
            Allowance.objects
            .select_for_update()
            .get(fund_id=fund_id, number=number)
        )
    except Allowance.DoesNotExist:
        raise AllowanceNotFoundError(f"Allowance #{number} not found in fund {fund_id}")


def is_allowance_active(*, fund_id: UUID, number: int) -> bool:
    """Return True if the allowance exists and is not exhausted."""
    return Allowance.objects.filter(
        fund_id=fund_id,
        number=number,
        archived_at__isnull=True,
    ).exists()


def get_active_allowances(*, fund_id: UUID) -> QuerySet[Allowance]:
    """Return the fund's active allowances in creation order."""
    fund = get_fund_by_id(fund_id=fund_id)
    return (
        fund.get_active_allowances()
        .select_related('beneficiary')
        .prefetch_related('approvals__approver')
    )


def get_active_allowance_numbers(*, fund_id: UUID) -> List[int]:
    return list(get_active_allowances(fund_id=fund_id).values_list('number', flat=True))


def get_all_allowances(*, fund_id: UUID) -> QuerySet[Allowance]:
    """Return every allowance of the fund, archived ones included."""
    fund = get_fund_by_id(fund_id=fund_id)
    return (
        fund.allowances
        .order_by('number')
        .select_related('beneficiary')
        .prefetch_related('approvals__approver')
    )


def allowances_count(*, fund_id: UUID) -> int:
    """Number of allowances currently in the active set."""
    return get_fund_by_id(fund_id=fund_id).get_active_allowances().count()


def get_beneficiary_allowances(*, user: User, include_archived: bool = False) -> QuerySet[Allowance]:
    """Allowances across all funds where user is the beneficiary."""
    queryset = Allowance.objects.filter(beneficiary=user)
    if not include_archived:
        queryset = queryset.filter(archived_at__isnull=True)
    return (
        queryset
        .select_related('fund', 'beneficiary')
        .prefetch_related('approvals__approver')
        .order_by('fund__created_at', 'number')
    )


def remove_from_active(allowance: Allowance) -> Allowance:
    """
    Take an exhausted allowance out of the active set.

    Only the withdrawal path calls this, once spent has reached total. The
    change is made on the instance; the caller saves it together with
    ``spent`` so the active/exhausted check constraint holds.

    Raises:
        AllowanceNotActiveError: If the allowance was already archived
    """
    if not allowance.is_active:
        raise AllowanceNotActiveError(f"Allowance #{allowance.number} is not active")

    allowance.archived_at = timezone.now()
    return allowance
