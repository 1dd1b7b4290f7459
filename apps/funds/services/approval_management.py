"""
Approval service.

Threshold voting on allowances. Unlock state is never stored: it is
recomputed from the approver count whenever it is needed.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.funds.models import Allowance, Approval
from apps.funds.signals import allowance_approved, allowance_unlocked

from .exceptions import NotBenefactorError, AlreadyApprovedError
from .allowance_management import lock_allowance
from .fund_management import lock_fund
from .notifications import notify_on_commit, allowance_payload

logger = logging.getLogger(__name__)


@transaction.atomic
def approve_allowance(*, fund_id: UUID, number: int, caller: User) -> Allowance:
    """
    Record a benefactor's approval of an allowance.

    Approvals keep being accepted past the threshold and on archived
    allowances; they only matter for withdrawals while the allowance is
    active. The unlock notification fires exactly once, on the approval that
    brings the count to the threshold.

    Args:
        fund_id: UUID of the fund
        number: Allowance number within the fund
        caller: Benefactor approving

    Returns:
        The approved Allowance instance

    Raises:
        FundNotFoundError: If fund doesn't exist
        AllowanceNotFoundError: If the allowance was never created
        NotBenefactorError: If caller is not a benefactor
        AlreadyApprovedError: If caller already approved this allowance
    """
    fund = lock_fund(fund_id)
    allowance = lock_allowance(fund.id, number)

    if not fund.is_benefactor(caller):
        logger.warning("Rejected approval of allowance #%s in fund %s by non-benefactor %s",
                       number, fund.id, caller)
        raise NotBenefactorError("Only benefactors can approve allowances")

    if allowance.has_approved(caller):
        raise AlreadyApprovedError(f"{caller} already approved allowance #{number}")

    position = allowance.approval_count
    Approval.objects.create(allowance=allowance, approver=caller, position=position)
    approvals = position + 1

    payload = allowance_payload(allowance)
    notify_on_commit(allowance_approved, sender=Allowance, approver=caller, **payload)

    # Approvals are never removed, so equality is reached exactly once
    if approvals == allowance.required_approvals:
        notify_on_commit(allowance_unlocked, sender=Allowance, **payload)
        logger.info("Allowance #%s in fund %s unlocked", number, fund.id)

    logger.info("Allowance #%s in fund %s approved by %s (%d/%d)",
                number, fund.id, caller, approvals, allowance.required_approvals)
    return allowance
