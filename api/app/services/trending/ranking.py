"""Pure recency-weighted scoring for trending rankings."""

from typing import Dict, Iterable, List

from app.models.feedback import REACTION_SCORES, Reaction
from app.models.trending import TrackScore


def recency_weight(timestamp: int, cutoff: int, window_ms: int) -> float:
    """Linear weight in (0, 1]: 1 for a reaction made now, near 0 at the cutoff."""
    return (timestamp - cutoff) / window_ms


def score_tracks(
    reactions: Iterable[Reaction], cutoff: int, window_ms: int
) -> List[TrackScore]:
    """Score every track with reactions newer than ``cutoff``.

    A track's score is the sum of ordinal value times recency weight,
    divided by its reaction count (not by the summed weight). Tracks with
    few but very recent reactions are therefore damped; callers rely on
    this exact formula.

    Returns tracks sorted by descending score. Equal scores keep their
    first-seen order.
    """
    weighted: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for reaction in reactions:
        if reaction.timestamp <= cutoff:
            continue
        weight = recency_weight(reaction.timestamp, cutoff, window_ms)
        weighted[reaction.track_id] = (
            weighted.get(reaction.track_id, 0.0) + REACTION_SCORES[reaction.kind] * weight
        )
        counts[reaction.track_id] = counts.get(reaction.track_id, 0) + 1

    scores = [
        TrackScore(
            track_id=track_id,
            score=total / max(counts[track_id], 1),
            reaction_count=counts[track_id],
        )
        for track_id, total in weighted.items()
    ]
    scores.sort(key=lambda s: s.score, reverse=True)
    return scores
