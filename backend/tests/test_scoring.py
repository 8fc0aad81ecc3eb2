from dataclasses import replace
from datetime import datetime

import pytest

from contribboard.scoring.calculator import calculate_scores, revision_points
from contribboard.scoring.records import RevisionEvent
from contribboard.scoring.weights import DEFAULT_WEIGHTS, ScoringWeights

AT = datetime(2024, 5, 1, 12, 0, 0)


def event(user_id=1, *, new_page=False, length=0, model="wikitext"):
    return RevisionEvent(
        user_id=user_id,
        is_new_page=new_page,
        byte_length=length,
        content_model=model,
        timestamp=AT,
    )


def test_score_composition_example():
    scores = calculate_scores(
        base_counts={1: 50},
        revisions=[event(new_page=True, length=40), event(length=500)],
        uploads={1: 1},
    )

    assert scores == {1: 71.0}


@pytest.mark.parametrize(
    ("length", "expected"),
    [
        (0, 1),
        (99, 1),
        (100, 3),
        (999, 3),
        (1000, 5),
        (25_000, 5),
    ],
)
def test_size_tiers(length, expected):
    assert revision_points(event(length=length)) == expected


def test_new_page_bonus_ignores_size():
    assert revision_points(event(new_page=True, length=5000)) == 10


@pytest.mark.parametrize(
    ("model", "expected"),
    [
        ("wikitext", 10.0),
        ("javascript", 13.0),
        ("css", 13.0),
        ("json", 12.0),
        ("text", 8.0),
    ],
)
def test_content_model_weights(model, expected):
    assert revision_points(event(new_page=True, model=model)) == pytest.approx(expected)


@pytest.mark.parametrize("model", [None, "sanitized-css", "Scribunto"])
def test_unknown_content_model_is_not_scaled(model):
    assert revision_points(event(length=500, model=model)) == 3


def test_uploads_add_fixed_bonus_each():
    scores = calculate_scores(base_counts={1: 0, 2: 0}, uploads={1: 3})

    assert scores == {1: 24.0, 2: 0.0}


def test_activity_of_unknown_users_is_ignored():
    scores = calculate_scores(
        base_counts={1: 5},
        revisions=[event(user_id=2, new_page=True)],
        uploads={3: 4},
    )

    assert scores == {1: 5.0}


def test_missing_edit_count_counts_as_zero():
    assert calculate_scores(base_counts={1: None}) == {1: 0.0}


def test_total_is_rounded_to_one_decimal():
    revisions = [event(length=50, model="text") for _ in range(3)]

    scores = calculate_scores(base_counts={1: 0}, revisions=revisions)

    assert scores == {1: 2.4}


def test_patrol_bonus_is_never_applied():
    patrol_heavy = replace(DEFAULT_WEIGHTS, page_patrolled=1000)
    revisions = [event(new_page=True), event(length=10)]

    assert calculate_scores(base_counts={1: 1}, revisions=revisions, weights=patrol_heavy) == calculate_scores(
        base_counts={1: 1}, revisions=revisions
    )


def test_custom_weights_are_used():
    flat = ScoringWeights(new_page=1, edit_small=1, edit_medium=1, edit_large=1, file_upload=1, content_models={})
    revisions = [event(new_page=True, model="javascript"), event(length=5000, model="css")]

    assert calculate_scores(base_counts={1: 0}, revisions=revisions, uploads={1: 2}, weights=flat) == {1: 4.0}


def test_breakdown_does_not_change_scores():
    revisions = [event(new_page=True, model="javascript"), event(length=250)]
    plain = calculate_scores(base_counts={1: 7}, revisions=revisions, uploads={1: 1})

    breakdowns = {}
    detailed = calculate_scores(base_counts={1: 7}, revisions=revisions, uploads={1: 1}, breakdowns=breakdowns)

    assert detailed == plain
    breakdown = breakdowns[1]
    assert breakdown.total == plain[1]
    assert breakdown.components == pytest.approx(
        {"base": 7.0, "new_page": 13.0, "edit_medium": 3.0, "file_upload": 8.0}
    )
    assert breakdown.steps[0] == "lifetime edit count: 7"
    assert breakdown.steps[-1] == f"total: {plain[1]:g}"


def test_scores_can_go_negative_without_clamping():
    penalised = ScoringWeights(edit_small=-4)

    assert calculate_scores(base_counts={1: 1}, revisions=[event(length=1)], weights=penalised) == {1: -3.0}


def test_weights_share_the_default_content_model_table():
    assert ScoringWeights().content_models is DEFAULT_WEIGHTS.content_models
    assert ScoringWeights(new_page=20).content_model_weight("json") == 1.2


def test_scores_add_up_revision_points():
    revisions = [
        event(new_page=True, model="css"),
        event(length=120, model="json"),
        event(length=4000, model="text"),
        event(length=3, model=None),
    ]

    scores = calculate_scores(base_counts={1: 0}, revisions=revisions)

    assert scores[1] == round(sum(revision_points(item) for item in revisions), 1)
