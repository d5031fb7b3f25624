"""Feedback package: reactions, per-track summaries and the feedback stream."""

from app.services.feedback.aggregation import tally_summary
from app.services.feedback.feedback_service import FeedbackService
from app.services.feedback.reaction_repository import (
    ReactionRepository,
    SummaryRepository,
)

__all__ = [
    "FeedbackService",
    "ReactionRepository",
    "SummaryRepository",
    "tally_summary",
]
