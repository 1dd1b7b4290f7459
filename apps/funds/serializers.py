from decimal import Decimal

from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer
from .models import Fund, Allowance


AMOUNT_FIELD_KWARGS = {
    'max_digits': 18,
    'decimal_places': 2,
    'min_value': Decimal('0.01'),
}


# =============================================================================
# Output serializers
# =============================================================================

class FundSerializer(serializers.ModelSerializer):
    """Main serializer for funds."""

    benefactors = serializers.SerializerMethodField()
    allowances_count = serializers.SerializerMethodField()
    is_benefactor = serializers.SerializerMethodField()

    class Meta:
        model = Fund
        fields = [
            'id',
            'name',
            'maximum_allowance',
            'balance',
            'benefactors',
            'allowances_count',
            'is_benefactor',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_benefactors(self, obj):
        return UserMinimalSerializer(obj.get_benefactors(), many=True).data

    def get_allowances_count(self, obj):
        """Number of active allowances."""
        return obj.get_active_allowances().count()

    def get_is_benefactor(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.is_benefactor(request.user)
        return False


class FundListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    class Meta:
        model = Fund
        fields = ['id', 'name', 'maximum_allowance', 'balance', 'created_at']
        read_only_fields = fields


class AllowanceSerializer(serializers.ModelSerializer):
    """
    Allowance snapshot: total, spent, beneficiary, threshold and approvers.

    ``id`` is the per-fund allowance number.
    """

    id = serializers.IntegerField(source='number', read_only=True)
    fund = serializers.UUIDField(source='fund_id', read_only=True)
    beneficiary = UserMinimalSerializer(read_only=True)
    approvers = serializers.SerializerMethodField()
    remaining = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    is_active = serializers.BooleanField(read_only=True)
    is_unlocked = serializers.BooleanField(read_only=True)

    class Meta:
        model = Allowance
        fields = [
            'id',
            'fund',
            'total',
            'spent',
            'remaining',
            'beneficiary',
            'required_approvals',
            'approvers',
            'is_active',
            'is_unlocked',
            'created_at',
            'archived_at',
        ]
        read_only_fields = fields

    def get_approvers(self, obj):
        return UserMinimalSerializer(obj.get_approvers(), many=True).data


# =============================================================================
# Input serializers
# =============================================================================

class FundCreateSerializer(serializers.Serializer):
    """Input for constructing a fund."""

    name = serializers.CharField(max_length=200)
    benefactors = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        many=True,
        allow_empty=False,
    )
    maximum_allowance = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)


class AllowanceCreateSerializer(serializers.Serializer):
    """Input for creating an allowance."""

    amount = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    beneficiary = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    required_approvals = serializers.IntegerField(min_value=1)


class AmountInputSerializer(serializers.Serializer):
    """Input for deposits and withdrawals."""

    amount = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)


class AllowanceFilterSerializer(serializers.Serializer):
    """Query parameters for allowance listings."""

    status = serializers.ChoiceField(choices=['active', 'all'], required=False, default='active')


class AllowanceActiveSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    is_active = serializers.BooleanField()
