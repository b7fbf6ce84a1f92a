"""
RoMod - Centralized Constants
=============================

Magic numbers and enumerated values shared across modules.
Import from this module instead of hardcoding values.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Time Constants (in seconds)
# =============================================================================

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800

# =============================================================================
# Database Constants
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0          # sqlite3.connect timeout
SQLITE_BUSY_TIMEOUT = 5000            # PRAGMA busy_timeout (ms)

# =============================================================================
# Case Values
# =============================================================================

BAN_KINDS = ("permanent", "temporary", "warning")
APPEAL_DECISIONS = ("approved", "denied")
TICKET_PRIORITIES = ("low", "medium", "high")
REPORT_DECISIONS = ("reviewed", "dismissed")

DEFAULT_TICKET_CATEGORY = "general"
DEFAULT_TICKET_PRIORITY = "medium"

# =============================================================================
# Aggregator
# =============================================================================

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200
SEARCH_LIMIT = 20

# Risk score weights (score capped at RISK_SCORE_MAX)
RISK_PER_BAN = 20
RISK_ACTIVE_BAN = 30
RISK_PER_REPORT = 5
RISK_PER_IMPORTANT_NOTE = 10
RISK_SCORE_MAX = 100

# =============================================================================
# Relay
# =============================================================================

RELAY_MAX_ATTEMPTS = 3
RELAY_BASE_DELAY = 2.0
RELAY_MAX_DELAY = 30.0
API_TIMEOUT = 10                      # External API request timeout

ROBLOX_API_BASE = "https://apis.roblox.com/cloud/v2"
DISCORD_API_BASE = "https://discord.com/api/v10"

# =============================================================================
# Realtime
# =============================================================================

REALTIME_RECONNECT_DELAY = 3.0        # Fixed client reconnect delay
WS_HEARTBEAT_INTERVAL = 30            # Server ping interval

# =============================================================================
# Limits
# =============================================================================

REASON_MAX_LENGTH = 1000
APPEAL_TEXT_MAX_LENGTH = 4000
NOTE_MAX_LENGTH = 2000
TICKET_TITLE_MAX_LENGTH = 200
EMBED_FIELD_MAX_LENGTH = 1024
