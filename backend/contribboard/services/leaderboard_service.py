from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..enums import QueryStrategy, TimeFrame
from ..schemas.leaderboard import DebugInfo, LeaderboardQuery, LeaderboardResult
from ..scoring.assembler import assemble, order_by_value
from ..scoring.records import ScoreBreakdown
from ..scoring.weights import DEFAULT_WEIGHTS, ScoringWeights
from .activity_repository import ActivityRepository, RankedRow
from .score_service import compute_scores, utcnow

logger = logging.getLogger(__name__)


def select_strategy(score_mode: bool, time_frame: TimeFrame) -> QueryStrategy:
    """
    The user table's edit-count column is cheap but has no time dimension and
    no weighting, so windowed or scored requests must read revisions.
    """
    if score_mode:
        return QueryStrategy.SCORED
    if time_frame == TimeFrame.ALL:
        return QueryStrategy.USER_TABLE
    return QueryStrategy.REVISION_BASED


@dataclass
class LeaderboardReport:
    result: LeaderboardResult
    debug: DebugInfo


class LeaderboardService:
    def __init__(
        self,
        repository: ActivityRepository,
        *,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        oversample: int = 3,
        now: datetime | None = None,
    ) -> None:
        self.repository = repository
        self.weights = weights
        self.oversample = max(1, oversample)
        self.now = now

    async def fetch(self, query: LeaderboardQuery) -> LeaderboardReport:
        strategy = select_strategy(query.score_mode, query.time_frame)
        debug = DebugInfo(strategy=strategy)
        logger.debug(
            "Building leaderboard strategy=%s limit=%s offset=%s",
            strategy.value,
            query.limit,
            query.offset,
        )

        if strategy == QueryStrategy.SCORED:
            result = await self._scored(query, debug)
        elif strategy == QueryStrategy.USER_TABLE:
            rows = await self.repository.top_by_edit_count(
                limit=query.limit,
                offset=query.offset,
                exclude_bots=query.exclude_bots,
            )
            debug.steps.append(f"user table rows: {len(rows)}")
            result = self._from_rows(rows, query)
        else:
            since = query.time_frame.lower_bound(self.now or utcnow())
            rows = await self.repository.top_by_revision_count(
                since=since,
                limit=query.limit,
                offset=query.offset,
                exclude_bots=query.exclude_bots,
            )
            debug.steps.append(f"revision count rows since {since:%Y-%m-%d %H:%M:%S}: {len(rows)}")
            result = self._from_rows(rows, query)

        debug.steps.append(f"entries: {result.count}")
        return LeaderboardReport(result=result, debug=debug)

    @staticmethod
    def _from_rows(rows: list[RankedRow], query: LeaderboardQuery) -> LeaderboardResult:
        # Count strategies are already ordered and paged by the database.
        return assemble(
            [row.user_id for row in rows],
            {row.user_id: row.value for row in rows},
            {row.user_id: row.user_name for row in rows},
            offset=query.offset,
            limit=query.limit,
        )

    async def _scored(self, query: LeaderboardQuery, debug: DebugInfo) -> LeaderboardResult:
        # Weighting reshuffles the edit-count order, so scores are computed
        # over an oversampled pool and the requested page is cut afterwards.
        pool_size = self.oversample * (query.offset + query.limit)
        candidates = await self.repository.top_by_edit_count(
            limit=pool_size,
            offset=0,
            exclude_bots=query.exclude_bots,
        )
        debug.steps.append(f"candidates: {len(candidates)} of pool size {pool_size}")
        if not candidates:
            debug.steps.append("no candidates found")
            return LeaderboardResult.empty()

        breakdowns: dict[int, ScoreBreakdown] | None = {} if query.show_debug else None
        scores = await compute_scores(
            self.repository,
            [row.user_id for row in candidates],
            query.time_frame,
            weights=self.weights,
            now=self.now,
            breakdowns=breakdowns,
        )
        debug.steps.append(f"scored users: {len(scores)}")
        if not scores:
            debug.steps.append("no scores calculated")
            return LeaderboardResult.empty()

        page_ids = order_by_value(scores)[query.offset : query.offset + query.limit]
        debug.steps.append(f"after slicing: {len(page_ids)}")
        if not page_ids:
            return LeaderboardResult.empty()

        names = await self.repository.display_names(page_ids)
        debug.steps.append(f"display names resolved: {len(names)}")
        if not names:
            return LeaderboardResult.empty()

        excluded = await self.repository.bot_group_members() if query.exclude_bots else set()
        result = assemble(
            page_ids,
            scores,
            names,
            offset=query.offset,
            limit=query.limit,
            excluded=excluded,
        )
        if breakdowns is not None:
            debug.breakdowns = [breakdowns[entry.user_id] for entry in result.entries]
        return result
