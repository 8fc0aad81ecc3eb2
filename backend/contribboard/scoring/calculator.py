from typing import Iterable, Mapping

from .records import RevisionEvent, ScoreBreakdown
from .weights import DEFAULT_WEIGHTS, ScoringWeights


def _classify(event: RevisionEvent, weights: ScoringWeights) -> tuple[str, float]:
    if event.is_new_page:
        return "new_page", weights.new_page
    if event.byte_length < weights.medium_threshold:
        return "edit_small", weights.edit_small
    if event.byte_length < weights.large_threshold:
        return "edit_medium", weights.edit_medium
    return "edit_large", weights.edit_large


def revision_points(event: RevisionEvent, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    _, points = _classify(event, weights)
    return points * weights.content_model_weight(event.content_model)


def calculate_scores(
    *,
    base_counts: Mapping[int, int],
    revisions: Iterable[RevisionEvent] = (),
    uploads: Mapping[int, int] | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    breakdowns: dict[int, ScoreBreakdown] | None = None,
) -> dict[int, float]:
    """
    Turn raw activity into one contribution score per user.

    Every user in ``base_counts`` starts from their lifetime edit count. Each
    revision adds the new-page bonus or a size-tier bonus scaled by the page's
    content-model weight, and each upload adds the upload bonus. Activity for
    users outside ``base_counts`` is ignored. Totals are rounded to one
    decimal place.

    When ``breakdowns`` is given it is filled with a ScoreBreakdown per user.
    It has no influence on the returned scores.
    """
    totals: dict[int, float] = {user_id: float(count or 0) for user_id, count in base_counts.items()}

    if breakdowns is not None:
        for user_id, base in totals.items():
            breakdown = ScoreBreakdown(user_id=user_id)
            breakdown.add("base", base, f"lifetime edit count: {base:g}")
            breakdowns[user_id] = breakdown

    for event in revisions:
        if event.user_id not in totals:
            continue
        amount = revision_points(event, weights)
        totals[event.user_id] += amount
        if breakdowns is not None:
            source, points = _classify(event, weights)
            multiplier = weights.content_model_weight(event.content_model)
            model = event.content_model or "unknown"
            breakdowns[event.user_id].add(
                source,
                amount,
                f"{source} ({event.byte_length} bytes, {model}): {points:g} x {multiplier:g}",
            )

    for user_id, count in (uploads or {}).items():
        if user_id not in totals or not count:
            continue
        bonus = count * weights.file_upload
        totals[user_id] += bonus
        if breakdowns is not None:
            breakdowns[user_id].add("file_upload", bonus, f"file uploads: {count} x {weights.file_upload:g}")

    scores = {user_id: round(total, 1) for user_id, total in totals.items()}

    if breakdowns is not None:
        for user_id, score in scores.items():
            breakdowns[user_id].total = score
            breakdowns[user_id].steps.append(f"total: {score:g}")

    return scores
