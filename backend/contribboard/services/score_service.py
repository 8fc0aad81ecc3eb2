from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from ..enums import TimeFrame
from ..errors import RepositoryError
from ..scoring.calculator import calculate_scores
from ..scoring.records import ScoreBreakdown
from ..scoring.weights import DEFAULT_WEIGHTS, ScoringWeights
from .activity_repository import ActivityRepository

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    # Wiki timestamps are stored as naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def compute_scores(
    repository: ActivityRepository,
    user_ids: Iterable[int],
    time_frame: TimeFrame,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    now: datetime | None = None,
    breakdowns: dict[int, ScoreBreakdown] | None = None,
) -> dict[int, float]:
    """
    Score each user from their lifetime edit count plus the revision and
    upload bonuses earned inside ``time_frame``.

    A failing revision scan degrades to lifetime edit counts without bonuses,
    a failing upload query only drops the upload bonus, and a failing base
    query yields an empty mapping.
    """
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return {}

    try:
        base_counts = await repository.base_edit_counts(ids)
    except RepositoryError:
        logger.exception("Base edit counts unavailable for %s users", len(ids))
        return {}

    since = time_frame.lower_bound(now or utcnow())

    try:
        revisions = await repository.revisions_for(ids, since)
    except RepositoryError as exc:
        logger.warning("Revision scoring failed, using lifetime edit counts: %s", exc)
        return calculate_scores(base_counts=base_counts, weights=weights, breakdowns=breakdowns)

    try:
        uploads = await repository.uploads_for(ids, since)
    except RepositoryError as exc:
        logger.warning("Upload scoring skipped: %s", exc)
        uploads = {}

    return calculate_scores(
        base_counts=base_counts,
        revisions=revisions,
        uploads=uploads,
        weights=weights,
        breakdowns=breakdowns,
    )
