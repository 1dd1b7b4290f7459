"""
Domain exceptions for funds app.

These exceptions represent business rule violations raised by the funds
services layer. They are synchronous, raised before any mutation of the
failing operation is committed, and should be caught in views and converted
to appropriate HTTP responses.

Exception Hierarchy:
    FundsServiceError (base)
    ├── FundNotFoundError
    ├── AuthorizationError
    │   ├── NotBenefactorError
    │   └── NotBeneficiaryError
    ├── ValidationError
    │   ├── EmptyBenefactorsError
    │   ├── DuplicateBenefactorError
    │   ├── InvalidMaximumAllowanceError
    │   ├── InvalidAmountError
    │   ├── InvalidThresholdError
    │   ├── MissingBeneficiaryError
    │   └── AllowanceExceedsMaximumError
    └── StateError
        ├── AllowanceNotFoundError
        ├── AllowanceNotActiveError
        ├── AlreadyApprovedError
        ├── ThresholdNotMetError
        ├── InsufficientRemainingError
        ├── InsufficientFundsError
        └── ReentrantWithdrawalError

Usage:
    from apps.funds.services.exceptions import StateError

    try:
        withdraw_allowance(fund_id=fund.id, number=1, amount=amount, caller=user)
    except StateError as e:
        return Response({'error': str(e), 'code': e.code}, status=400)
"""


class FundsServiceError(Exception):
    """Base exception for all funds service errors."""

    code = 'funds_error'


class FundNotFoundError(FundsServiceError):
    """Raised when a fund does not exist."""

    code = 'fund_not_found'


# =============================================================================
# Authorization: caller lacks the required role
# =============================================================================

class AuthorizationError(FundsServiceError):
    """Base for errors where the caller lacks the required role."""

    code = 'not_authorized'


class NotBenefactorError(AuthorizationError):
    """Raised when a non-benefactor creates, approves or deposits."""

    code = 'not_benefactor'


class NotBeneficiaryError(AuthorizationError):
    """Raised when anyone but the designated beneficiary withdraws."""

    code = 'not_beneficiary'


# =============================================================================
# Validation: malformed construction or creation arguments
# =============================================================================

class ValidationError(FundsServiceError):
    """Base for malformed construction, creation or amount arguments."""

    code = 'invalid'


class EmptyBenefactorsError(ValidationError):
    """Raised when a fund is constructed without benefactors."""

    code = 'empty_benefactors'


class DuplicateBenefactorError(ValidationError):
    """Raised when the same user is listed twice as benefactor."""

    code = 'duplicate_benefactor'


class InvalidMaximumAllowanceError(ValidationError):
    """Raised when the maximum allowance cap is zero or negative."""

    code = 'invalid_maximum_allowance'


class InvalidAmountError(ValidationError):
    """Raised when an allowance, deposit or withdrawal amount is not positive."""

    code = 'invalid_amount'


class InvalidThresholdError(ValidationError):
    """Raised when required approvals is below one."""

    code = 'invalid_threshold'


class MissingBeneficiaryError(ValidationError):
    """Raised when an allowance is created without a beneficiary."""

    code = 'missing_beneficiary'


class AllowanceExceedsMaximumError(ValidationError):
    """Raised when an allowance amount exceeds the fund's cap."""

    code = 'allowance_exceeds_maximum'


# =============================================================================
# State: operation invalid for the current allowance state
# =============================================================================

class StateError(FundsServiceError):
    """Base for operations invalid in the allowance's current state."""

    code = 'invalid_state'


class AllowanceNotFoundError(StateError):
    """Raised when an allowance number was never assigned in the fund."""

    code = 'allowance_not_found'


class AllowanceNotActiveError(StateError):
    """Raised when withdrawing from (or archiving) an exhausted allowance."""

    code = 'not_active'


class AlreadyApprovedError(StateError):
    """Raised when a benefactor approves the same allowance twice."""

    code = 'already_approved'


class ThresholdNotMetError(StateError):
    """Raised when withdrawing before enough approvals are collected."""

    code = 'threshold_not_met'


class InsufficientRemainingError(StateError):
    """Raised when a withdrawal exceeds the allowance's remaining amount."""

    code = 'insufficient_remaining'


class InsufficientFundsError(StateError):
    """Raised when the fund's custodied balance cannot cover a withdrawal."""

    code = 'insufficient_funds'


class ReentrantWithdrawalError(StateError):
    """Raised when a withdrawal re-enters an allowance already mid-withdrawal."""

    code = 'reentrant_withdrawal'
