"""Qt models for cctime."""

from cctime.models.daily_stats_model import DailyStatsModel

__all__ = ["DailyStatsModel"]
