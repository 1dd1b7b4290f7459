"""
Custom permission classes for funds app.

Read access only; every state change is authorized again by the services
layer, which is the source of truth for benefactor and beneficiary roles.
"""
from rest_framework.permissions import BasePermission


class IsFundBenefactor(BasePermission):
    """
    Permission: User must be one of the fund's benefactors.
    """

    message = 'You must be a benefactor of this fund.'

    def has_object_permission(self, request, view, obj):
        # obj is a Fund instance
        return obj.is_benefactor(request.user)


class CanViewAllowance(BasePermission):
    """
    Permission to view an allowance.

    Allows if:
    - User is a benefactor of the allowance's fund
    - User is the allowance's beneficiary
    """

    message = 'You do not have permission to view this allowance.'

    def has_object_permission(self, request, view, obj):
        # obj is an Allowance instance
        if obj.beneficiary_id == request.user.pk:
            return True
        return obj.fund.is_benefactor(request.user)
