"""
RoMod - Services Package
========================

Domain services behind the HTTP API.

Available Services:
    cases: Case state machine (CaseService) and change events
    aggregator: Cross-server player history (CrossServerAggregator)
    relay: Background enforcement and chat log relay
    realtime_client: Reconnecting websocket client (RealtimeConnection)

Import from the submodules directly; this package exports nothing so
that the relay and case packages can import each other's leaves.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""
