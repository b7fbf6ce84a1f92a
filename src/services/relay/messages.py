"""
RoMod - Relay Log Messages
==========================

Builds the chat log content for each relayed case change.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional

from src.core.config import EmbedColors
from src.core.database import AppealRecord, BanRecord, ReportRecord
from src.services.relay.jobs import LogMessage
from src.utils.duration import format_duration


def _player(record) -> str:
    name = record.get("player_name")
    return f"{name} (`{record['player_id']}`)" if name else f"`{record['player_id']}`"


def ban_issued_message(ban: BanRecord) -> LogMessage:
    duration = None
    if ban.get("expires_at") is not None:
        duration = ban["expires_at"] - ban["issued_at"]

    if ban["kind"] == "warning":
        title, color = "⚠️ Warning Issued", EmbedColors.WARNING
    else:
        title, color = "🔨 Player Banned", EmbedColors.BAN

    fields = [
        ("Player", _player(ban)),
        ("Moderator", f"<@{ban['issued_by']}>"),
        ("Kind", ban["kind"].title()),
        ("Duration", format_duration(duration) if ban["kind"] != "warning" else "N/A"),
        ("Reason", ban["reason"]),
        ("Ban ID", f"`{ban['id']}`"),
    ]
    if ban.get("evidence"):
        fields.append(("Evidence", "\n".join(ban["evidence"][:5])))
    return LogMessage(title=title, color=color, fields=fields)


def ban_lifted_message(
    ban: BanRecord,
    moderator_id: str,
    via: str,
    note: Optional[str] = None,
) -> LogMessage:
    title = "✅ Appeal Approved, Ban Lifted" if via == "appeal" else "🔓 Player Unbanned"
    return LogMessage(
        title=title,
        color=EmbedColors.UNBAN,
        fields=[
            ("Player", _player(ban)),
            ("Moderator", f"<@{moderator_id}>"),
            ("Original Reason", ban["reason"]),
            ("Note", note or "None"),
            ("Ban ID", f"`{ban['id']}`"),
        ],
    )


def appeal_submitted_message(appeal: AppealRecord, ban: BanRecord) -> LogMessage:
    preview = appeal["text"]
    if len(preview) > 300:
        preview = preview[:300] + "..."
    return LogMessage(
        title="📨 Appeal Submitted",
        color=EmbedColors.APPEAL,
        description=preview,
        fields=[
            ("Player", _player(ban)),
            ("Submitter", f"`{appeal['submitter_id']}`"),
            ("Ban Reason", ban["reason"]),
            ("Appeal ID", f"`{appeal['id']}`"),
        ],
    )


def appeal_denied_message(appeal: AppealRecord) -> LogMessage:
    return LogMessage(
        title="❌ Appeal Denied",
        color=EmbedColors.APPEAL,
        fields=[
            ("Reviewer", f"<@{appeal['reviewed_by']}>"),
            ("Note", appeal.get("review_note") or "None"),
            ("Ban ID", f"`{appeal['ban_id']}`"),
            ("Appeal ID", f"`{appeal['id']}`"),
        ],
    )


def report_filed_message(report: ReportRecord) -> LogMessage:
    return LogMessage(
        title="🚩 Player Reported",
        color=EmbedColors.REPORT,
        fields=[
            ("Player", _player(report)),
            ("Reported By", f"<@{report['reported_by']}>"),
            ("Reason", report["reason"]),
            ("Report ID", f"`{report['id']}`"),
        ],
    )


__all__ = [
    "ban_issued_message",
    "ban_lifted_message",
    "appeal_submitted_message",
    "appeal_denied_message",
    "report_filed_message",
]
