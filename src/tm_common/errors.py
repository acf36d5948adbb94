"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Queue / devices
  3xxx: Match / settlement
  9xxx: System (reserved)
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


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class InvalidEventTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid event delivery token", 401)


# --- 2xxx: Queue / devices ---

class QueueEntryNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2001, f"User {user_id} is not in the queue", 404)


class InvalidPushTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(2002, "push_token must not be blank", 422)


# --- 3xxx: Match / settlement ---

class MatchIdRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(3001, "matchId is required", 422)


class MatchNotFoundError(AppError):
    def __init__(self, match_id: str) -> None:
        super().__init__(3002, f"Match not found: {match_id}", 404)


class NotAMatchPlayerError(AppError):
    def __init__(self, match_id: str) -> None:
        super().__init__(3003, f"Caller is not a player in match {match_id}", 403)


class MatchAlreadyCompletedError(AppError):
    def __init__(self, match_id: str) -> None:
        super().__init__(3004, f"Match already completed: {match_id}", 409)


class MatchCompletionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3099, f"Failed to complete match: {detail}", 500)
