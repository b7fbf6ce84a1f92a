"""
RoMod - API Utilities
=====================

Utility functions for the API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .pagination import page_meta, create_paginated_response

__all__ = [
    "page_meta",
    "create_paginated_response",
]
