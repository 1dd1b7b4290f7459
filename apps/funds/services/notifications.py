"""
Notification dispatch.

Signals are queued on the surrounding transaction and only sent once it
commits, so a rolled-back operation never notifies anyone.
"""

from functools import partial

from django.db import transaction


def notify_on_commit(signal, *, sender, **kwargs) -> None:
    """Send ``signal`` after the current transaction commits."""
    transaction.on_commit(partial(signal.send, sender=sender, **kwargs))


def allowance_payload(allowance) -> dict:
    """Fields every allowance notification carries."""
    return {
        'fund_id': allowance.fund_id,
        'allowance_id': allowance.number,
        'beneficiary': allowance.beneficiary,
    }
