from .client import DraftClient, RateLimiter
from .source import DraftScheduleSource, ScheduleSource, StaticScheduleSource

__all__ = ["DraftClient", "RateLimiter", "DraftScheduleSource", "ScheduleSource", "StaticScheduleSource"]
