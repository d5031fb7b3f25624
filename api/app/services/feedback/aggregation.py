"""Pure summary arithmetic over a track's reactions."""

from collections import Counter
from typing import Iterable

from app.models.feedback import REACTION_SCORES, FeedbackSummary, ReactionKind


def tally_summary(
    track_id: str, kinds: Iterable[ReactionKind], now: int
) -> FeedbackSummary:
    """Build a track's summary from scratch out of every stored reaction kind.

    The average is the mean ordinal value (love=4 .. dislike=1) and is 0 when
    the track has no reactions.
    """
    counts = Counter(ReactionKind(kind) for kind in kinds)
    total = sum(counts.values())
    weighted = sum(REACTION_SCORES[kind] * n for kind, n in counts.items())
    return FeedbackSummary(
        track_id=track_id,
        love_count=counts[ReactionKind.LOVE],
        like_count=counts[ReactionKind.LIKE],
        meh_count=counts[ReactionKind.MEH],
        dislike_count=counts[ReactionKind.DISLIKE],
        total_count=total,
        average_score=weighted / total if total else 0.0,
        last_updated=now,
    )
