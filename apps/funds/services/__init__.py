"""
Funds app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations run in a single transaction with row locks
(fund first, then allowance), so each either commits every effect or none.
"""

from .exceptions import (
    FundsServiceError,
    FundNotFoundError,
    AuthorizationError,
    NotBenefactorError,
    NotBeneficiaryError,
    ValidationError,
    EmptyBenefactorsError,
    DuplicateBenefactorError,
    InvalidMaximumAllowanceError,
    InvalidAmountError,
    InvalidThresholdError,
    MissingBeneficiaryError,
    AllowanceExceedsMaximumError,
    StateError,
    AllowanceNotFoundError,
    AllowanceNotActiveError,
    AlreadyApprovedError,
    ThresholdNotMetError,
    InsufficientRemainingError,
    InsufficientFundsError,
    ReentrantWithdrawalError,
)

from .fund_management import (
    create_fund,
    get_fund_by_id,
    get_benefactors,
    is_benefactor,
    deposit,
)

from .allowance_management import (
    create_allowance,
    get_allowance,
    is_allowance_active,
    get_active_allowances,
    get_active_allowance_numbers,
    get_all_allowances,
    allowances_count,
    get_beneficiary_allowances,
)

from .approval_management import (
    approve_allowance,
)

from .withdrawal_management import (
    withdraw_allowance,
)


__all__ = [
    # Exceptions
    'FundsServiceError',
    'FundNotFoundError',
    'AuthorizationError',
    'NotBenefactorError',
    'NotBeneficiaryError',
    'ValidationError',
    'EmptyBenefactorsError',
    'DuplicateBenefactorError',
    'InvalidMaximumAllowanceError',
    'InvalidAmountError',
    'InvalidThresholdError',
    'MissingBeneficiaryError',
    'AllowanceExceedsMaximumError',
    'StateError',
    'AllowanceNotFoundError',
    'AllowanceNotActiveError',
    'AlreadyApprovedError',
    'ThresholdNotMetError',
    'InsufficientRemainingError',
    'InsufficientFundsError',
    'ReentrantWithdrawalError',

    # Fund Management
    'create_fund',
    'get_fund_by_id',
    'get_benefactors',
    'is_benefactor',
    'deposit',

    # Allowance Management
    'create_allowance',
    'get_allowance',
    'is_allowance_active',
    'get_active_allowances',
    'get_active_allowance_numbers',
    'get_all_allowances',
    'allowances_count',
    'get_beneficiary_allowances',

    # Approvals
    'approve_allowance',

    # Withdrawals
    'withdraw_allowance',
]
