import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..database import get_session
from ..enums import ResponseStatus
from ..errors import LeaderboardError
from ..schemas.leaderboard import (
    DebugInfo,
    LeaderboardQuery,
    LeaderboardResponse,
    LeaderboardResult,
    PaginationLinks,
)
from ..scoring.weights import DEFAULT_WEIGHTS, ScoringWeights
from ..services.activity_repository import ActivityRepository
from ..services.leaderboard_service import LeaderboardService

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(tags=["leaderboard"])

NO_RESULTS_MESSAGE = "No contributors found for the selected filters."
UNEXPECTED_ERROR_MESSAGE = "The leaderboard could not be built."
SCORING_EXPLANATION = (
    "Scores start from the lifetime edit count. Each new page adds 10 points; "
    "other edits add 1, 3 or 5 points for small (under 100 bytes), medium "
    "(under 1000 bytes) or large pages. Edit points are scaled by content type "
    "(scripts and stylesheets 1.3, JSON 1.2, plain text 0.8). Each file upload "
    "adds 8 points."
)


def get_repository(session: AsyncSession = Depends(get_session)) -> ActivityRepository:
    return ActivityRepository(
        session,
        bot_group=settings.bot_group,
        revision_cap=settings.revision_scan_cap,
        query_timeout=settings.query_timeout_seconds,
    )


def get_scoring_weights() -> ScoringWeights:
    return DEFAULT_WEIGHTS


def _pagination(request: Request, query: LeaderboardQuery, *, has_next: bool) -> PaginationLinks:
    prev_link = None
    if query.offset > 0:
        prev_offset = max(0, query.offset - query.limit)
        prev_link = str(request.url.include_query_params(**query.to_query_params(offset=prev_offset)))
    next_link = None
    if has_next:
        next_link = str(request.url.include_query_params(**query.to_query_params(offset=query.offset + query.limit)))
    return PaginationLinks(prev=prev_link, next=next_link)


def _build_response(
    request: Request,
    query: LeaderboardQuery,
    *,
    status: ResponseStatus,
    result: LeaderboardResult | None = None,
    message: str | None = None,
    debug: DebugInfo | None = None,
) -> LeaderboardResponse:
    result = result or LeaderboardResult.empty()
    return LeaderboardResponse(
        status=status,
        message=message,
        entries=result.entries,
        count=result.count,
        limit=query.limit,
        offset=query.offset,
        exclude_bots=query.exclude_bots,
        time_frame=query.time_frame,
        score_mode=query.score_mode,
        value_label="score" if query.score_mode else "edit_count",
        limit_choices=settings.limit_choices,
        scoring_explanation=SCORING_EXPLANATION if query.score_mode else None,
        pagination=_pagination(request, query, has_next=status == ResponseStatus.OK),
        debug=debug if query.show_debug else None,
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def read_leaderboard(
    request: Request,
    repository: ActivityRepository = Depends(get_repository),
    weights: ScoringWeights = Depends(get_scoring_weights),
) -> LeaderboardResponse:
    query = LeaderboardQuery.from_query_params(
        request.query_params,
        default_limit=settings.default_limit,
        max_limit=settings.max_limit,
        max_offset=settings.max_offset,
    )
    service = LeaderboardService(
        repository,
        weights=weights,
        oversample=settings.candidate_oversample,
    )

    try:
        report = await service.fetch(query)
    except LeaderboardError as exc:
        logger.error("Leaderboard request failed: %s", exc)
        return _build_response(
            request,
            query,
            status=ResponseStatus.ERROR,
            message=f"{exc.user_message} ({exc})",
        )
    except Exception as exc:
        logger.exception("Unexpected failure while building the leaderboard")
        return _build_response(
            request,
            query,
            status=ResponseStatus.ERROR,
            message=f"{UNEXPECTED_ERROR_MESSAGE} ({exc})",
        )

    if not report.result.entries:
        return _build_response(
            request,
            query,
            status=ResponseStatus.EMPTY,
            message=NO_RESULTS_MESSAGE,
            debug=report.debug,
        )

    return _build_response(
        request,
        query,
        status=ResponseStatus.OK,
        result=report.result,
        debug=report.debug,
    )
