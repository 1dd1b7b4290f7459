"""Log every fund notification. Connected in FundsConfig.ready()."""

import logging

from django.dispatch import receiver

from .models import Allowance, Fund
from .signals import (
    allowance_created,
    allowance_approved,
    allowance_unlocked,
    allowance_consumed,
    allowance_exhausted,
    funds_deposited,
)

logger = logging.getLogger(__name__)


@receiver(allowance_created, sender=Allowance)
def log_allowance_created(sender, fund_id, allowance_id, beneficiary, amount, required_approvals, **kwargs):
    logger.info(
        "AllowanceCreated fund=%s id=%s beneficiary=%s amount=%s required_approvals=%s",
        fund_id, allowance_id, beneficiary, amount, required_approvals,
    )


@receiver(allowance_approved, sender=Allowance)
def log_allowance_approved(sender, fund_id, allowance_id, beneficiary, approver, **kwargs):
    logger.info(
        "AllowanceApproved fund=%s id=%s beneficiary=%s approver=%s",
        fund_id, allowance_id, beneficiary, approver,
    )


@receiver(allowance_unlocked, sender=Allowance)
def log_allowance_unlocked(sender, fund_id, allowance_id, beneficiary, **kwargs):
    logger.info("AllowanceUnlocked fund=%s id=%s beneficiary=%s", fund_id, allowance_id, beneficiary)


@receiver(allowance_consumed, sender=Allowance)
def log_allowance_consumed(sender, fund_id, allowance_id, beneficiary, amount, remaining, **kwargs):
    logger.info(
        "AllowanceConsumed fund=%s id=%s beneficiary=%s amount=%s remaining=%s",
        fund_id, allowance_id, beneficiary, amount, remaining,
    )


@receiver(allowance_exhausted, sender=Allowance)
def log_allowance_exhausted(sender, fund_id, allowance_id, beneficiary, **kwargs):
    logger.info("AllowanceExhausted fund=%s id=%s beneficiary=%s", fund_id, allowance_id, beneficiary)


@receiver(funds_deposited, sender=Fund)
def log_funds_deposited(sender, fund_id, depositor, amount, balance, **kwargs):
    logger.info(
        "FundsDeposited fund=%s depositor=%s amount=%s balance=%s",
        fund_id, depositor, amount, balance,
    )
