"""Error taxonomy for the fusion swap escrows.

Every failure raised by an escrow operation derives from ``FusionError`` and
leaves the escrow untouched. The ``code`` attribute is a stable identifier
that callers can match on without depending on message text.
"""


class FusionError(Exception):
    """Base class for escrow-related failures."""

    code = "FusionError"
    message = "Fusion escrow error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.message)


# Validation


class ValidationError(FusionError, ValueError):
    """Malformed or inconsistent order terms."""

    code = "ValidationError"


class InvalidAmount(ValidationError):
    code = "InvalidAmount"
    message = "Invalid amount"


class InconsistentNativeSrcTrait(ValidationError):
    code = "InconsistentNativeSrcTrait"
    message = "Inconsistent native src trait"


class InconsistentNativeDstTrait(ValidationError):
    code = "InconsistentNativeDstTrait"
    message = "Inconsistent native dst trait"


class OrderExpired(ValidationError):
    code = "OrderExpired"
    message = "Order expired"


class InvalidEstimatedTakingAmount(ValidationError):
    code = "InvalidEstimatedTakingAmount"
    message = "Invalid estimated taking amount"


class InvalidProtocolSurplusFee(ValidationError):
    code = "InvalidProtocolSurplusFee"
    message = "Protocol surplus fee too high"


class InconsistentProtocolFeeConfig(ValidationError):
    code = "InconsistentProtocolFeeConfig"
    message = "Inconsistent protocol fee config"


class InconsistentIntegratorFeeConfig(ValidationError):
    code = "InconsistentIntegratorFeeConfig"
    message = "Inconsistent integrator fee config"


class InvalidCancellationFee(ValidationError):
    code = "InvalidCancellationFee"
    message = "Invalid cancellation fee"


class OrderHashMismatch(ValidationError):
    code = "OrderHashMismatch"
    message = "Order terms do not match any escrow"


class InvalidHashLock(ValidationError):
    code = "InvalidHashLock"
    message = "Hash lock must be 32 bytes"


class InvalidSecret(ValidationError):
    code = "InvalidSecret"
    message = "Invalid secret"


class InvalidDuration(ValidationError):
    code = "InvalidDuration"
    message = "Time lock duration out of bounds"


# State conflicts


class StateConflictError(FusionError):
    """Operation is not valid for the escrow's current state."""

    code = "StateConflictError"


class OrderNotExpired(StateConflictError):
    code = "OrderNotExpired"
    message = "Order not expired"


class CancelOrderByResolverIsForbidden(StateConflictError):
    code = "CancelOrderByResolverIsForbidden"
    message = "Cancel order by resolver is forbidden"


class EscrowNotFound(StateConflictError):
    code = "EscrowNotFound"
    message = "Escrow not found"


class EscrowAlreadyExists(StateConflictError):
    code = "EscrowAlreadyExists"
    message = "Escrow already exists"


class EscrowNotActive(StateConflictError):
    code = "EscrowNotActive"
    message = "Escrow is no longer active"


class AlreadyClaimed(StateConflictError):
    code = "AlreadyClaimed"
    message = "Escrow already claimed"


class AlreadyRefunded(StateConflictError):
    code = "AlreadyRefunded"
    message = "Escrow already refunded"


class TimelockExpired(StateConflictError):
    code = "TimelockExpired"
    message = "Timelock has expired, use refund instead"


class TimelockNotExpired(StateConflictError):
    code = "TimelockNotExpired"
    message = "Timelock has not expired yet"


# Authorization


class AuthorizationError(FusionError, PermissionError):
    """Caller is not entitled to act in the required role."""

    code = "AuthorizationError"


class Unauthorized(AuthorizationError):
    code = "Unauthorized"
    message = "Unauthorized"


# Arithmetic


class ArithmeticOverflowError(FusionError, ArithmeticError):
    """Overflow or underflow in pricing or fee computation."""

    code = "ArithmeticOverflow"
    message = "Arithmetic overflow"


# Resources


class InsufficientBalanceError(FusionError):
    """Not enough value to cover the requested movement."""

    code = "InsufficientBalance"


class NotEnoughTokensInEscrow(InsufficientBalanceError):
    code = "NotEnoughTokensInEscrow"
    message = "Not enough tokens in escrow"


class InsufficientFunds(InsufficientBalanceError):
    code = "InsufficientFunds"
    message = "Insufficient funds"
