"""
Withdrawal service.

Authorizes and applies consumption of an allowance, then pays out.

Ordering inside the transaction is strict: every check runs before any
mutation, all allowance and fund state is saved, and only then is the
payout backend called. A nested withdrawal of the same allowance on the
same thread (for example triggered from a payout backend) is refused.
"""

import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.funds.models import Allowance
from apps.funds.payouts import get_payout_backend
from apps.funds.signals import allowance_consumed, allowance_exhausted

from .exceptions import (
    InvalidAmountError,
    AllowanceNotActiveError,
    ThresholdNotMetError,
    NotBeneficiaryError,
    InsufficientRemainingError,
    InsufficientFundsError,
    ReentrantWithdrawalError,
)
from .amounts import is_valid_amount
from .allowance_management import lock_allowance, remove_from_active
from .fund_management import lock_fund
from .notifications import notify_on_commit, allowance_payload

logger = logging.getLogger(__name__)

_local = threading.local()


@contextmanager
def _withdrawal_guard(fund_id, number):
    """Refuse re-entry into the same allowance on the current thread."""
    in_flight = getattr(_local, 'in_flight', None)
    if in_flight is None:
        in_flight = _local.in_flight = set()

    key = (str(fund_id), number)
    if key in in_flight:
        raise ReentrantWithdrawalError(f"Allowance #{number} is already being withdrawn from")

    in_flight.add(key)
    try:
        yield
    finally:
        in_flight.discard(key)


def withdraw_allowance(*, fund_id: UUID, number: int, amount: Decimal, caller: User) -> Allowance:
    """
    Withdraw from an unlocked allowance as its beneficiary.

    Checks run in this order: amount, active, threshold (recomputed on
    every call), beneficiary, remaining amount, fund balance. Any failure
    leaves spent, approvers, the active set and the fund balance unchanged.

    Args:
        fund_id: UUID of the fund
        number: Allowance number within the fund
        amount: Value to withdraw
        caller: User requesting the withdrawal

    Returns:
        Updated Allowance instance

    Raises:
        InvalidAmountError: If amount is not positive or has more than
            two decimal places
        FundNotFoundError: If fund doesn't exist
        AllowanceNotFoundError: If the allowance was never created
        AllowanceNotActiveError: If the allowance is exhausted
        ThresholdNotMetError: If approvals are below the threshold
        NotBeneficiaryError: If caller is not the beneficiary
        InsufficientRemainingError: If amount exceeds total - spent
        InsufficientFundsError: If the fund balance cannot cover amount
        ReentrantWithdrawalError: If called from within a withdrawal of
            the same allowance
    """
    if not is_valid_amount(amount):
        raise InvalidAmountError("Withdrawal amount must be greater than zero with at most two decimal places")

    with _withdrawal_guard(fund_id, number), transaction.atomic():
        fund = lock_fund(fund_id)
        allowance = lock_allowance(fund.id, number)

        if not allowance.is_active:
            raise AllowanceNotActiveError(f"Allowance #{number} is not active")

        if allowance.approval_count < allowance.required_approvals:
            raise ThresholdNotMetError(
                f"Allowance #{number} has {allowance.approval_count} of "
                f"{allowance.required_approvals} required approvals"
            )

        if caller is None or caller.pk != allowance.beneficiary_id:
            logger.warning("Rejected withdrawal from allowance #%s in fund %s by %s",
                           number, fund.id, caller)
            raise NotBeneficiaryError("Only the beneficiary can withdraw from this allowance")

        if allowance.remaining < amount:
            raise InsufficientRemainingError(
                f"Allowance #{number} has {allowance.remaining} remaining, {amount} requested"
            )

        if fund.balance < amount:
            raise InsufficientFundsError(
                f"Fund balance {fund.balance} cannot cover withdrawal of {amount}"
            )

        allowance.spent += amount
        exhausted = allowance.spent == allowance.total
        if exhausted:
            remove_from_active(allowance)
        allowance.save(update_fields=['spent', 'archived_at'])

        fund.balance -= amount
        fund.save(update_fields=['balance', 'updated_at'])

        payload = allowance_payload(allowance)
        notify_on_commit(
            allowance_consumed,
            sender=Allowance,
            amount=amount,
            remaining=allowance.remaining,
            **payload,
        )
        if exhausted:
            notify_on_commit(allowance_exhausted, sender=Allowance, **payload)

        logger.info(
            "Withdrawal of %s from allowance #%s in fund %s, %s remaining%s",
            amount, number, fund.id, allowance.remaining,
            " (exhausted)" if exhausted else "",
        )

        # State is final; the transfer is the last step
        get_payout_backend().send(
            fund=fund,
            allowance=allowance,
            recipient=caller,
            amount=amount,
        )

    return allowance
