"""
RoMod - Source Package
======================

Moderation case lifecycle and cross-server sync for Roblox game
servers managed from Discord.

Package Structure:
- api/: FastAPI app, routers, auth and websocket fan-out
- core/: Config, logging, errors, scope, settings and the case store
- services/: Case state machine, aggregator, relay and realtime client
- utils/: Duration parsing, retry and background task helpers

Author: حَـــــنَّـــــا
Server: discord.gg/syria
Version: v1.0.0
"""
