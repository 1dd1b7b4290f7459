"""
Fund notifications.

Every allowance notification is sent with ``sender=Allowance`` and carries
``fund_id``, ``allowance_id`` (the per-fund number) and ``beneficiary``.
Services dispatch them through ``transaction.on_commit``, so receivers only
ever observe committed operations.

Extra keyword arguments:
    allowance_created:   amount, required_approvals
    allowance_approved:  approver
    allowance_unlocked:  (none)
    allowance_consumed:  amount, remaining
    allowance_exhausted: (none)
    funds_deposited:     fund_id, depositor, amount, balance (sender=Fund)
"""

from django.dispatch import Signal


allowance_created = Signal()
allowance_approved = Signal()
allowance_unlocked = Signal()
allowance_consumed = Signal()
allowance_exhausted = Signal()

funds_deposited = Signal()
