"""
RoMod - Case Service Constants
==============================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Dict, Optional

# Recorded action kind -> shift counter it bumps (actions_count always bumps)
ACTION_METRICS: Dict[str, Optional[str]] = {
    "ban": "bans_issued",
    "warning": "bans_issued",
    "unban": None,
    "appeal_review": "appeals_reviewed",
    "ticket_close": "tickets_handled",
    "report_process": "reports_processed",
}

DEACTIVATION_UNBAN = "unban"
DEACTIVATION_APPEAL = "appeal"
DEACTIVATION_SUPERSEDED = "superseded"
DEACTIVATION_EXPIRED = "expired"

RELAY_PENDING = "pending"
RELAY_DELIVERED = "delivered"
RELAY_FAILED = "failed"
RELAY_SKIPPED = "skipped"
