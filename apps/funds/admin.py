# ==========================================
# apps/funds/admin.py
# ==========================================

from django.contrib import admin
from apps.funds.models import Fund, FundBenefactor, Allowance, Approval


class ReadOnlyAdminMixin:
    """
    Balances and allowances only change through the services layer,
    so the admin is an inspection surface.
    """

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class FundBenefactorInline(ReadOnlyAdminMixin, admin.TabularInline):
    """Inline admin for fund benefactors."""
    model = FundBenefactor
    extra = 0
    fields = ['position', 'user', 'joined_at']
    readonly_fields = fields
    ordering = ['position']


class ApprovalInline(ReadOnlyAdminMixin, admin.TabularInline):
    """Inline admin for allowance approvals."""
    model = Approval
    extra = 0
    fields = ['position', 'approver', 'approved_at']
    readonly_fields = fields
    ordering = ['position']


@admin.register(Fund)
class FundAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Admin interface for Funds."""

    list_display = [
        'name',
        'balance',
        'maximum_allowance',
        'benefactor_count',
        'active_allowance_count',
        'created_at',
    ]
    list_filter = ['created_at']
    search_fields = ['name', 'benefactor_memberships__user__email']
    readonly_fields = [
        'name',
        'balance',
        'maximum_allowance',
        'allowances_created',
        'created_by',
        'created_at',
        'updated_at',
    ]
    inlines = [FundBenefactorInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'created_by')
        }),
        ('Accounting', {
            'fields': ('balance', 'maximum_allowance', 'allowances_created')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def benefactor_count(self, obj):
        """Show number of benefactors."""
        return obj.benefactor_memberships.count()
    benefactor_count.short_description = 'Benefactors'

    def active_allowance_count(self, obj):
        return obj.get_active_allowances().count()
    active_allowance_count.short_description = 'Active allowances'


@admin.register(Allowance)
class AllowanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Admin interface for Allowances."""

    list_display = [
        'number',
        'fund',
        'beneficiary',
        'total',
        'spent',
        'approval_progress',
        'is_active',
        'created_at',
    ]
    list_filter = ['archived_at', 'created_at']
    search_fields = ['fund__name', 'beneficiary__email']
    readonly_fields = [
        'fund',
        'number',
        'total',
        'spent',
        'beneficiary',
        'required_approvals',
        'created_by',
        'created_at',
        'archived_at',
    ]
    inlines = [ApprovalInline]
    date_hierarchy = 'created_at'
    ordering = ['fund', 'number']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('fund', 'beneficiary')

    def approval_progress(self, obj):
        return f'{obj.approval_count}/{obj.required_approvals}'
    approval_progress.short_description = 'Approvals'

    def is_active(self, obj):
        return obj.is_active
    is_active.boolean = True
    is_active.short_description = 'Active'
