"""Domain error taxonomy.

Every error carries a stable ``code`` and the HTTP status the API layer maps it
to. Services raise these; ``lcc.middleware.error_handler`` turns them into a
structured failure body.
"""

from __future__ import annotations


class LCCError(Exception):
    """Base class for all domain errors."""

    code = "error"
    status_code = 400

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


# --- Input shape ---


class ValidationError(LCCError):
    code = "validation_error"
    status_code = 422


# --- Unknown entities ---


class NotFound(LCCError):
    code = "not_found"
    status_code = 404


class UserNotFound(NotFound):
    code = "user_not_found"


class QuestNotFound(NotFound):
    code = "quest_not_found"


class CollectibleNotFound(NotFound):
    code = "collectible_not_found"


class InvalidPath(NotFound):
    code = "invalid_path"


# --- State conflicts ---


class StateConflict(LCCError):
    code = "state_conflict"
    status_code = 409


class UsernameTaken(StateConflict):
    code = "username_taken"


class InvalidCredentials(StateConflict):
    code = "invalid_credentials"
    status_code = 401


class AlreadyStaked(StateConflict):
    code = "already_staked"


class NotStaked(StateConflict):
    code = "not_staked"


class NotCompletable(StateConflict):
    """Quest is not completed yet, or its reward was already claimed."""

    code = "not_completable"


class NoNextStage(StateConflict):
    code = "no_next_stage"


# --- Resources ---


class InsufficientResource(LCCError):
    code = "insufficient_resource"
    status_code = 400


class InsufficientProgress(InsufficientResource):
    code = "insufficient_progress"


class InsufficientBalance(InsufficientResource):
    code = "insufficient_balance"


# --- Collaborators ---


class ExternalServiceError(LCCError):
    code = "external_service_error"
    status_code = 502


class AssetLoadError(ExternalServiceError):
    code = "asset_load_error"


class LedgerError(ExternalServiceError):
    """Permanent ledger failure. Never retried."""

    code = "ledger_error"


class LedgerRateLimited(LedgerError):
    code = "ledger_rate_limited"


class LedgerTimeout(LedgerError):
    code = "ledger_timeout"


RETRYABLE_LEDGER_ERRORS: tuple[type[LedgerError], ...] = (LedgerRateLimited, LedgerTimeout)
