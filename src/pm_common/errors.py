"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity / authorization
  3xxx: Market lifecycle
  4xxx: Deposit (place_prediction)
  5xxx: Position / settlement
  6xxx: Fee treasury
  9xxx: System

Every guard failure aborts the whole operation; nothing here is retried by the core.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Taxonomy ---

class InvalidInputError(AppError):
    """Malformed input, rejected before any state is read."""

    def __init__(self, code: int, message: str, http_status: int = 422) -> None:
        super().__init__(code, message, http_status)


class AuthorizationError(AppError):
    """Caller identity does not match the required role."""

    def __init__(self, code: int, message: str, http_status: int = 403) -> None:
        super().__init__(code, message, http_status)


class StateConflictError(AppError):
    """Operation is invalid for the current lifecycle state."""

    def __init__(self, code: int, message: str, http_status: int = 422) -> None:
        super().__init__(code, message, http_status)


class EconomicError(AppError):
    """A computed amount fails a positivity or consistency check."""

    def __init__(self, code: int, message: str, http_status: int = 422) -> None:
        super().__init__(code, message, http_status)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


# --- 1xxx: Identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired credentials", 401)


class UnauthorizedError(AuthorizationError):
    def __init__(self, detail: str = "Unauthorized action") -> None:
        super().__init__(1101, detail)


# --- 3xxx: Market ---

class MarketNotFoundError(NotFoundError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}")


class InvalidQuestionError(InvalidInputError):
    def __init__(self, length: int) -> None:
        super().__init__(3101, f"Question must be 1-256 characters, got {length}")


class InvalidResolutionTimeError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(3102, "Resolution time must be in the future")


class MarketAlreadyExistsError(StateConflictError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3103, f"Market already exists: {market_id}", 409)


class MarketAlreadyResolvedError(StateConflictError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3201, f"Market already resolved: {market_id}", 409)


class MarketNotResolvedError(StateConflictError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3202, f"Market not resolved yet: {market_id}")


class MarketExpiredError(StateConflictError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3203, f"Market has expired: {market_id}")


class MarketNotExpiredError(StateConflictError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3204, f"Market resolution time has not passed: {market_id}")


class InvalidOutcomeError(EconomicError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3205, f"Market has no valid outcome: {market_id}")


# --- 4xxx: Deposit ---

class InvalidAmountError(InvalidInputError):
    def __init__(self, amount: int) -> None:
        super().__init__(4101, f"Invalid amount: {amount}")


class InsufficientOutputError(EconomicError):
    def __init__(self, amount: int, pool: int) -> None:
        super().__init__(
            4102,
            f"Insufficient output tokens: deposit {amount} against pool {pool} yields 0",
        )


class PositionExistsError(StateConflictError):
    def __init__(self, market_id: str, predictor: str) -> None:
        super().__init__(
            4103, f"Position already exists for {predictor} in market {market_id}", 409
        )


# --- 5xxx: Position / settlement ---

class PositionNotFoundError(NotFoundError):
    def __init__(self, market_id: str, predictor: str) -> None:
        super().__init__(5001, f"No position for {predictor} in market {market_id}")


class AlreadyClaimedError(StateConflictError):
    def __init__(self, market_id: str, predictor: str) -> None:
        super().__init__(
            5101, f"Reward already claimed by {predictor} in market {market_id}", 409
        )


class PredictionLostError(EconomicError):
    def __init__(self, market_id: str) -> None:
        super().__init__(5102, f"Prediction did not win in market {market_id}")


class NoRewardError(EconomicError):
    def __init__(self, market_id: str) -> None:
        super().__init__(5103, f"No reward available in market {market_id}")


class ReservoirExhaustedError(EconomicError):
    def __init__(self, reward: int, remaining: int) -> None:
        super().__init__(
            5104, f"Reward {reward} exceeds remaining reservoir {remaining}"
        )


# --- 6xxx: Fees ---

class InsufficientFeesError(EconomicError):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            6001,
            f"Insufficient fees collected: requested {requested}, available {available}",
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
