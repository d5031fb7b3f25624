"""Prometheus metrics for reactions, summaries and trending rankings.

Provides observability into:
- Reaction writes by operation and outcome
- Rate limit rejections
- Summary recompute latency
- Trending ranking runs, durations and sizes per timeframe
"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================
# Reaction metrics
# ============================================

reaction_operations_total = Counter(
    "trackpulse_reaction_operations_total",
    "Reaction write operations by outcome",
    ["operation", "outcome"],  # submit/update/delete, created/updated/deleted/rejected
)

reactions_by_kind_total = Counter(
    "trackpulse_reactions_by_kind_total",
    "Accepted reaction submissions by kind",
    ["kind", "anonymous"],
)

reaction_rate_limited_total = Counter(
    "trackpulse_reaction_rate_limited_total",
    "Submissions rejected by the per-user rate limit",
)

summary_recompute_seconds = Histogram(
    "trackpulse_summary_recompute_seconds",
    "Time spent recomputing a track's feedback summary",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0],
)

# ============================================
# Trending metrics
# ============================================

trending_runs_total = Counter(
    "trackpulse_trending_runs_total",
    "Trending ranking runs by timeframe and outcome",
    ["timeframe", "outcome"],  # success, failure
)

trending_run_duration_seconds = Histogram(
    "trackpulse_trending_run_duration_seconds",
    "Duration of trending ranking runs",
    ["timeframe"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0],
)

trending_entries = Gauge(
    "trackpulse_trending_entries",
    "Entries stored by the last successful ranking run",
    ["timeframe"],
)

trending_last_success_timestamp = Gauge(
    "trackpulse_trending_last_success_timestamp",
    "Unix timestamp of the last successful ranking run",
    ["timeframe"],
)


def record_trending_success(timeframe: str, entry_count: int, duration: float) -> None:
    """Record a completed ranking run."""
    trending_runs_total.labels(timeframe=timeframe, outcome="success").inc()
    trending_run_duration_seconds.labels(timeframe=timeframe).observe(duration)
    trending_entries.labels(timeframe=timeframe).set(entry_count)
    trending_last_success_timestamp.labels(timeframe=timeframe).set_to_current_time()


def record_trending_failure(timeframe: str) -> None:
    trending_runs_total.labels(timeframe=timeframe, outcome="failure").inc()
