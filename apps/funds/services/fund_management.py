"""
Fund management service.

Covers fund construction with its fixed benefactor set, benefactor queries
and gated deposits.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.funds.models import Fund, FundBenefactor
from apps.funds.signals import funds_deposited

from .exceptions import (
    FundNotFoundError,
    EmptyBenefactorsError,
    DuplicateBenefactorError,
    InvalidMaximumAllowanceError,
    InvalidAmountError,
    NotBenefactorError,
)
from .amounts import is_valid_amount
from .notifications import notify_on_commit

logger = logging.getLogger(__name__)


@transaction.atomic
def create_fund(
    *,
    name: str,
    benefactors: Sequence[User],
    maximum_allowance: Decimal,
    created_by: Optional[User] = None
) -> Fund:
    """
    Construct a fund with a fixed, ordered benefactor set.

    The benefactor set can never be changed afterwards.

    Args:
        name: Display name of the fund
        benefactors: Users who co-own the fund, in order
        maximum_allowance: Cap for every allowance created in this fund
        created_by: User constructing the fund (optional)

    Returns:
        Created Fund instance

    Raises:
        EmptyBenefactorsError: If no benefactors are given
        DuplicateBenefactorError: If a user is listed more than once
        InvalidMaximumAllowanceError: If maximum_allowance is not positive
            or has more than two decimal places
    """
    benefactors = list(benefactors)

    if not benefactors:
        raise EmptyBenefactorsError("A fund needs at least one benefactor")

    seen = set()
    for user in benefactors:
        if user.pk in seen:
            raise DuplicateBenefactorError(f"{user} is listed more than once as benefactor")
        seen.add(user.pk)

    if not is_valid_amount(maximum_allowance):
        raise InvalidMaximumAllowanceError(
            "Maximum allowance must be greater than zero with at most two decimal places"
        )

    fund = Fund.objects.create(
        name=name,
        maximum_allowance=maximum_allowance,
        created_by=created_by,
    )

    FundBenefactor.objects.bulk_create([
        FundBenefactor(fund=fund, user=user, position=position)
        for position, user in enumerate(benefactors)
    ])

    logger.info(
        "Fund %s created with %d benefactors, maximum allowance %s",
        fund.id, len(benefactors), maximum_allowance,
    )
    return fund


def get_fund_by_id(*, fund_id: UUID) -> Fund:
    """
    Get a fund by ID.

    Raises:
        FundNotFoundError: If fund doesn't exist
    """
    try:
        return Fund.objects.get(id=fund_id)
    except Fund.DoesNotExist:
        raise FundNotFoundError(f"Fund with ID {fund_id} not found")


def get_benefactors(*, fund_id: UUID) -> List[User]:
    """Return the fund's benefactors in construction order."""
    return get_fund_by_id(fund_id=fund_id).get_benefactors()


def is_benefactor(*, fund_id: UUID, user: User) -> bool:
    return get_fund_by_id(fund_id=fund_id).is_benefactor(user)


def lock_fund(fund_id: UUID) -> Fund:
    """Fetch a fund with a row lock. Must run inside a transaction."""
    try:
        return Fund.objects.select_for_update().get(id=fund_id)
    except Fund.DoesNotExist:
        raise FundNotFoundError(f"Fund with ID {fund_id} not found")


@transaction.atomic
def deposit(*, fund_id: UUID, caller: User, amount: Decimal) -> Fund:
    """
    Accept value into the fund from one of its benefactors.

    Deposited value is not tied to any allowance; it only raises the fund's
    aggregate balance that withdrawals draw from.

    Args:
        fund_id: UUID of the fund
        caller: User sending the value
        amount: Value deposited

    Returns:
        Updated Fund instance

    Raises:
        FundNotFoundError: If fund doesn't exist
        NotBenefactorError: If caller is not a benefactor
        InvalidAmountError: If amount is not positive or has more than
            two decimal places
    """
    fund = lock_fund(fund_id)

    if not fund.is_benefactor(caller):
        logger.warning("Rejected deposit to fund %s from non-benefactor %s", fund.id, caller)
        raise NotBenefactorError("Only benefactors can deposit into this fund")

    if not is_valid_amount(amount):
        raise InvalidAmountError("Deposit amount must be greater than zero with at most two decimal places")

    fund.balance += amount
    fund.save(update_fields=['balance', 'updated_at'])

    notify_on_commit(
        funds_deposited,
        sender=Fund,
        fund_id=fund.id,
        depositor=caller,
        amount=amount,
        balance=fund.balance,
    )

    logger.info("Deposit of %s into fund %s by %s", amount, fund.id, caller)
    return fund
