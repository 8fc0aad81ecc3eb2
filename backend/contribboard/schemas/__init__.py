from .leaderboard import (
    DebugInfo,
    LeaderboardEntry,
    LeaderboardQuery,
    LeaderboardResponse,
    LeaderboardResult,
    PaginationLinks,
)

__all__ = [
    "DebugInfo",
    "LeaderboardEntry",
    "LeaderboardQuery",
    "LeaderboardResponse",
    "LeaderboardResult",
    "PaginationLinks",
]
