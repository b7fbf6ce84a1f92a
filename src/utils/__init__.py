"""
RoMod - Utils Package
=====================

Stateless helpers used across the codebase.

Available Utilities:
    async_utils: Background tasks that log their failures
    duration: Ban duration parsing and formatting
    retry: Bounded exponential backoff for external calls

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .async_utils import create_safe_task, drain_tasks
from .duration import parse_duration, format_duration
from .retry import retry_async, backoff_delay


__all__ = [
    "create_safe_task",
    "drain_tasks",
    "parse_duration",
    "format_duration",
    "retry_async",
    "backoff_delay",
]
