"""
Exceptions raised by the leaderboard pipeline.

Each error carries a technical message for logs and a short ``user_message``
that is safe to show next to the leaderboard.
"""

DATABASE_ERROR_MESSAGE = "A database error occurred while building the leaderboard."


class LeaderboardError(Exception):
    """Base exception for leaderboard-related errors."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class RepositoryError(LeaderboardError):
    """Raised when a query against the wiki database fails."""

    def __init__(self, operation: str, details: str | None = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            DATABASE_ERROR_MESSAGE,
        )
        self.operation = operation
        self.details = details


class RepositoryUnavailableError(RepositoryError):
    """Raised when the database cannot be reached or rejects the statement."""


class QueryTimeoutError(RepositoryError):
    """Raised when a statement exceeds the per-query execution ceiling."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(operation, f"query exceeded {timeout:g}s execution limit")
        self.timeout = timeout


class SchemaIncompatibleError(LeaderboardError):
    """Raised when an optional column is missing from the wiki schema."""

    def __init__(self, column: str):
        super().__init__(f"Column '{column}' is not available in this schema")
        self.column = column
