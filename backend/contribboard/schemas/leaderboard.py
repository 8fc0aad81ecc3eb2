from typing import List, Mapping

from pydantic import BaseModel, Field

from ..enums import QueryStrategy, ResponseStatus, TimeFrame
from ..scoring.records import ScoreBreakdown

_FALSE_VALUES = {"", "0", "false", "no", "off"}


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def _parse_time_frame(raw: str | None) -> TimeFrame:
    if raw is None:
        return TimeFrame.ALL
    try:
        return TimeFrame(raw.strip().lower())
    except ValueError:
        return TimeFrame.ALL


class LeaderboardQuery(BaseModel):
    limit: int = Field(default=25, ge=1)
    offset: int = Field(default=0, ge=0)
    exclude_bots: bool = True
    time_frame: TimeFrame = TimeFrame.ALL
    score_mode: bool = False
    show_debug: bool = False

    @classmethod
    def from_query_params(
        cls,
        params: Mapping[str, str],
        *,
        default_limit: int = 25,
        max_limit: int = 500,
        max_offset: int = 10_000,
    ) -> "LeaderboardQuery":
        """
        Read request parameters the forgiving way a wiki page does: values
        that cannot be understood fall back to their defaults instead of
        failing the request.
        """
        limit = _parse_int(params.get("limit"), default_limit)
        if limit < 1:
            limit = default_limit
        return cls(
            limit=min(limit, max_limit),
            offset=min(max(0, _parse_int(params.get("offset"), 0)), max_offset),
            exclude_bots=_parse_bool(params.get("excludeBots"), True),
            time_frame=_parse_time_frame(params.get("timeFrame")),
            score_mode=_parse_bool(params.get("scoreMode"), False),
            show_debug=_parse_bool(params.get("showDebug"), False),
        )

    def to_query_params(self, *, offset: int) -> dict[str, str]:
        return {
            "limit": str(self.limit),
            "offset": str(offset),
            "excludeBots": "1" if self.exclude_bots else "0",
            "timeFrame": self.time_frame.value,
            "scoreMode": "1" if self.score_mode else "0",
            "showDebug": "1" if self.show_debug else "0",
        }


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    display_name: str
    value: int | float


class LeaderboardResult(BaseModel):
    entries: List[LeaderboardEntry] = Field(default_factory=list)
    count: int = 0

    @classmethod
    def empty(cls) -> "LeaderboardResult":
        return cls(entries=[], count=0)


class PaginationLinks(BaseModel):
    prev: str | None = None
    next: str | None = None


class DebugInfo(BaseModel):
    strategy: QueryStrategy
    steps: List[str] = Field(default_factory=list)
    breakdowns: List[ScoreBreakdown] = Field(default_factory=list)


class LeaderboardResponse(BaseModel):
    status: ResponseStatus
    message: str | None = None
    entries: List[LeaderboardEntry]
    count: int
    limit: int
    offset: int
    exclude_bots: bool
    time_frame: TimeFrame
    score_mode: bool
    value_label: str
    limit_choices: List[int]
    scoring_explanation: str | None = None
    pagination: PaginationLinks
    debug: DebugInfo | None = None
