# ==========================================
# apps/funds/models.py
# ==========================================

from django.db import models
from django.db.models import F, Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class Fund(models.Model):
    """Shared-custody fund controlled by a fixed set of benefactors."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)

    # Cap applied to every allowance created in this fund
    maximum_allowance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    # Aggregate custodied value, not tied to any allowance
    balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal('0.00')
    )

    # Last assigned allowance number (numbers start at 1 and are never reused)
    allowances_created = models.PositiveIntegerField(default=0, editable=False)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='funds_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'funds'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(maximum_allowance__gt=0),
                name='fund_maximum_allowance_positive',
            ),
            models.CheckConstraint(
                condition=Q(balance__gte=0),
                name='fund_balance_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.name} (max {self.maximum_allowance})"

    def get_benefactors(self):
        """Return benefactor users in construction order."""
        return [
            membership.user
            for membership in self.benefactor_memberships.select_related('user').order_by('position')
        ]

    def is_benefactor(self, user):
        if user is None or not getattr(user, 'pk', None):
            return False
        return self.benefactor_memberships.filter(user_id=user.pk).exists()

    def get_active_allowances(self):
        return self.allowances.filter(archived_at__isnull=True).order_by('number')


class FundBenefactor(models.Model):
    """Fixed membership of a user in a fund's benefactor set."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    fund = models.ForeignKey(Fund, on_delete=models.CASCADE, related_name='benefactor_memberships')
    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='benefactor_memberships')
    position = models.PositiveIntegerField()
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fund_benefactors'
        unique_together = [['fund', 'user'], ['fund', 'position']]
        indexes = [
            models.Index(fields=['user', 'joined_at']),
        ]
        ordering = ['position']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.fund.name} (#{self.position})"


class Allowance(models.Model):
    """Capped, threshold-gated spending grant to a single beneficiary."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    fund = models.ForeignKey(Fund, on_delete=models.CASCADE, related_name='allowances')

    # Sequential per-fund identifier exposed to callers
    number = models.PositiveIntegerField(editable=False)

    total = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    spent = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal('0.00')
    )

    beneficiary = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='allowances_received'
    )
    required_approvals = models.PositiveIntegerField()

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='allowances_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    # Set once, when spent reaches total
    archived_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'allowances'
        unique_together = [['fund', 'number']]
        indexes = [
            models.Index(fields=['fund', 'archived_at']),
            models.Index(fields=['beneficiary', 'archived_at']),
        ]
        ordering = ['fund', 'number']
        constraints = [
            models.CheckConstraint(
                condition=Q(spent__gte=0) & Q(spent__lte=F('total')),
                name='allowance_spent_within_total',
            ),
            models.CheckConstraint(
                condition=(
                    Q(archived_at__isnull=True, spent__lt=F('total'))
                    | Q(archived_at__isnull=False, spent=F('total'))
                ),
                name='allowance_active_iff_not_exhausted',
            ),
        ]

    def __str__(self):
        return f"Allowance #{self.number} - {self.spent}/{self.total} to {self.beneficiary}"

    @property
    def is_active(self):
        return self.archived_at is None

    @property
    def remaining(self):
        return self.total - self.spent

    @property
    def approval_count(self):
        return self.approvals.count()

    @property
    def is_unlocked(self):
        """Recomputed on every access; never persisted."""
        return self.approval_count >= self.required_approvals

    def get_approvers(self):
        """Return approving users in approval order (creator first)."""
        return [
            approval.approver
            for approval in self.approvals.select_related('approver').order_by('position')
        ]

    def has_approved(self, user):
        return self.approvals.filter(approver_id=user.pk).exists()


class Approval(models.Model):
    """A benefactor's vote for an allowance."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    allowance = models.ForeignKey(Allowance, on_delete=models.CASCADE, related_name='approvals')
    approver = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='allowance_approvals')
    position = models.PositiveIntegerField()
    approved_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'allowance_approvals'
        unique_together = [['allowance', 'approver'], ['allowance', 'position']]
        ordering = ['position']

    def __str__(self):
        return f"{self.approver} approved allowance #{self.allowance.number}"
