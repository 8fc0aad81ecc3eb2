from typing import Iterable, Mapping, Sequence

from ..schemas.leaderboard import LeaderboardEntry, LeaderboardResult


def order_by_value(values: Mapping[int, float]) -> list[int]:
    """User ids by value descending, equal values by ascending user id."""
    return sorted(values, key=lambda user_id: (-values[user_id], user_id))


def assemble(
    candidate_ids: Sequence[int],
    values: Mapping[int, int | float],
    display_names: Mapping[int, str],
    *,
    offset: int,
    limit: int,
    excluded: Iterable[int] = (),
) -> LeaderboardResult:
    """
    Join ordered user ids with their values and names into a ranked page.

    The input order is kept and at most ``limit`` ids are used. Ids without a
    display name or value, and ids in ``excluded``, are dropped. Ranks are
    numbered from ``offset + 1`` over what remains.
    """
    skip = set(excluded)
    entries: list[LeaderboardEntry] = []
    for user_id in candidate_ids[:limit]:
        if user_id in skip:
            continue
        name = display_names.get(user_id)
        value = values.get(user_id)
        if name is None or value is None:
            continue
        entries.append(
            LeaderboardEntry(
                rank=offset + len(entries) + 1,
                user_id=user_id,
                display_name=name,
                value=value,
            )
        )
    return LeaderboardResult(entries=entries, count=len(entries))
