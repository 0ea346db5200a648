"""Tax Recommendations for Creators.

This module provides:
- Heuristic savings recommendations for a tax snapshot
- Quarterly estimated / advance tax due dates and reminders
- Real-time tax jar guidance and flat-rate set-aside breakdowns
"""

from .recommendation_engine import CreatorTaxRecommendationEngine
from .due_dates import DueDate, DueDateTracker, build_reminders
from .realtime_estimator import RealTimeEstimator, calculate_tax_set_aside

__all__ = [
    "CreatorTaxRecommendationEngine",
    "DueDate",
    "DueDateTracker",
    "build_reminders",
    "RealTimeEstimator",
    "calculate_tax_set_aside",
]
