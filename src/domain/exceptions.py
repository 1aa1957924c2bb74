"""
Domain exceptions - Semantic error types for account recovery.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Every domain error carries a stable code qualified with the user account
recovery scenario prefix (``UAR-``), so the outer API layer can map them
to localized messages. Client errors are caller-fixable; server errors wrap
a collaborator failure, which is chained as ``__cause__``.

The second half of the module defines the errors raised BY adapters
(directory, status provider, recovery store). The domain services catch
those and raise a new domain error; they never mutate the caught one.
"""

USER_ACCOUNT_RECOVERY = "UAR"


def qualify_error_code(code: str, scenario: str = USER_ACCOUNT_RECOVERY) -> str:
    """Prefix an error code with the operation scenario, once."""
    prefix = f"{scenario}-"
    if code.startswith(prefix):
        return code
    return prefix + code


class RecoveryError(Exception):
    """Base class for account recovery domain errors."""

    code: str = qualify_error_code("65000")
    message: str = "Unexpected error during account recovery"

    def __init__(self, detail: str | None = None, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.detail = detail
        super().__init__(self.code, self.message, detail)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code} - {self.message}: {self.detail}"
        return f"{self.code} - {self.message}"


class RecoveryClientError(RecoveryError):
    """Caller-fixable recovery failure."""

    pass


class RecoveryServerError(RecoveryError):
    """Collaborator failure; the underlying error is chained as the cause."""

    pass


class NoClaimsProvided(RecoveryClientError):
    code = qualify_error_code("10001")
    message = "No fields found for user recovery"


class NoUserFound(RecoveryClientError):
    code = qualify_error_code("10002")
    message = "No user found for the given claims"


class MultipleUsersMatched(RecoveryClientError):
    code = qualify_error_code("10003")
    message = "Multiple users matched for the given claims"


class AccountDisabled(RecoveryClientError):
    code = qualify_error_code("10004")
    message = "Account is disabled"


class AccountLocked(RecoveryClientError):
    code = qualify_error_code("10005")
    message = "Account is locked"


class NoChannelsConfigured(RecoveryClientError):
    code = qualify_error_code("10006")
    message = "No notification channels configured for the user"


class NoVerifiedChannelsForUser(RecoveryClientError):
    code = qualify_error_code("10007")
    message = "No verified notification channels available for the user"


class InvalidRecoveryCode(RecoveryClientError):
    code = qualify_error_code("10008")
    message = "Invalid recovery code"


class ExpiredRecoveryCode(RecoveryClientError):
    code = qualify_error_code("10009")
    message = "Expired recovery code"


class NoAccountRecoveryData(RecoveryClientError):
    code = qualify_error_code("10010")
    message = "No account recovery data found for the recovery code"


class InvalidTenantDomain(RecoveryClientError):
    code = qualify_error_code("10011")
    message = "Invalid tenant domain"


class UserClaimRetrievalError(RecoveryServerError):
    code = qualify_error_code("15001")
    message = "Error retrieving users for claim"


class UserClaimsLoadError(RecoveryServerError):
    code = qualify_error_code("15002")
    message = "Error loading user claims"


class AccountStatusCheckError(RecoveryServerError):
    code = qualify_error_code("15003")
    message = "Error checking account status"


class RecoveryDataStoreError(RecoveryServerError):
    code = qualify_error_code("15004")
    message = "Error storing recovery data"


class RecoveryStoreFailure(RecoveryServerError):
    """Unmapped recovery store failure; code is the store's, scenario-qualified."""

    message = "Error loading recovery data"


# Collaborator errors - raised by adapters, remapped by domain services.


class DirectoryError(Exception):
    """User directory lookup failed."""

    pass


class AccountStatusError(Exception):
    """Account status provider failed."""

    pass


class RecoveryStoreError(Exception):
    """Recovery data store failure with a store-level error code."""

    code = "18000"

    def __init__(self, message: str = "", *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message)


class InvalidCodeError(RecoveryStoreError):
    """Code is unknown to the store or has been invalidated."""

    code = "18001"


class ExpiredCodeError(RecoveryStoreError):
    """Code exists but its validity window has passed."""

    code = "18002"
