"""Centralized metrics module for Prometheus instrumentation.

This package holds the application's Prometheus metric definitions:
- feedback_metrics: reaction writes, rate limiting and trending runs

HTTP request metrics come from prometheus-fastapi-instrumentator in app.main.

Usage:
    from app.metrics.feedback_metrics import reaction_operations_total
"""

from app.metrics import feedback_metrics

__all__ = ["feedback_metrics"]
