"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Admin users
  2xxx: Wallet/Ledger
  3xxx: Pricing/Commission
  4xxx: Drivers
  5xxx: Moderation
  9xxx: System
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


# --- 1xxx: Auth/Admin users ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


# --- 2xxx: Wallet/Ledger ---

class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Invalid amount: {detail}", 422)


class WalletNotFoundError(AppError):
    def __init__(self, wallet_id: int | str) -> None:
        super().__init__(2002, f"Wallet not found: {wallet_id}", 404)


class DebtLimitExceededError(AppError):
    def __init__(self, balance: int, amount: int, limit: int) -> None:
        super().__init__(
            2003,
            f"Debit of {-amount} would take balance {balance} below the debt limit of -{limit}",
            422,
        )


class ConflictError(AppError):
    """Concurrent contention on the same wallet; safe to retry."""

    def __init__(self, detail: str = "Concurrent update in progress, retry") -> None:
        super().__init__(2004, detail, 409)


# --- 3xxx: Pricing/Commission ---

class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, f"Invalid input: {detail}", 422)


class InvalidConfigurationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Invalid configuration: {detail}", 422)


# --- 4xxx: Drivers ---

class DriverNotFoundError(AppError):
    def __init__(self, driver_id: int | str) -> None:
        super().__init__(4001, f"Driver not found: {driver_id}", 404)


class BlockReasonRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "A reason is required to block a driver", 422)


# --- 5xxx: Moderation ---

class ModerationSubjectNotFoundError(AppError):
    def __init__(self, subject_type: str, subject_id: int) -> None:
        super().__init__(5001, f"No {subject_type} with id {subject_id}", 404)


class InvalidModerationTransitionError(AppError):
    def __init__(self, action: str, state: str) -> None:
        super().__init__(5002, f"Cannot {action} a subject that is {state}", 409)


class ModerationReasonRequiredError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(5003, f"A reason is required to {action}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class PersistenceUnavailableError(AppError):
    """Storage failure; the whole operation may be retried."""

    def __init__(self, detail: str = "Storage temporarily unavailable, retry") -> None:
        super().__init__(9003, detail, 503)
