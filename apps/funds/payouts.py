"""
Payout backends.

A payout backend performs the outbound value transfer at the end of a
successful withdrawal. It is called inside the withdrawal's transaction,
after all allowance and fund state has been saved; raising from ``send``
rolls the whole withdrawal back.

The active backend is configured with the ``FUNDS_PAYOUT_BACKEND`` setting
(dotted path to a class)::

    FUNDS_PAYOUT_BACKEND = 'apps.funds.payouts.LoggingPayoutBackend'
"""

import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_PAYOUT_BACKEND = 'apps.funds.payouts.LoggingPayoutBackend'


class BasePayoutBackend:
    """Interface for outbound transfers to a beneficiary."""

    def send(self, *, fund, allowance, recipient, amount):
        raise NotImplementedError('Payout backends must implement send()')


class LoggingPayoutBackend(BasePayoutBackend):
    """Record the transfer in the log only."""

    def send(self, *, fund, allowance, recipient, amount):
        logger.info(
            "Payout of %s from fund %s to %s (allowance #%s)",
            amount, fund.id, recipient, allowance.number,
        )


class LocmemPayoutBackend(BasePayoutBackend):
    """
    Keep transfers in memory.

    Sent payouts accumulate in the class-level ``outbox`` list as dicts with
    fund_id, allowance_id, recipient and amount. Tests clear it between runs.
    """

    outbox = []

    def send(self, *, fund, allowance, recipient, amount):
        LocmemPayoutBackend.outbox.append({
            'fund_id': fund.id,
            'allowance_id': allowance.number,
            'recipient': recipient,
            'amount': amount,
        })


def get_payout_backend():
    """Instantiate the configured payout backend."""
    path = getattr(settings, 'FUNDS_PAYOUT_BACKEND', DEFAULT_PAYOUT_BACKEND)
    return import_string(path)()
