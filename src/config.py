"""
config.py

Central constants for Discotube.

This file intentionally contains ONLY:
- Constants
- API endpoints / scopes
- Defaults

Runtime configuration (environment variables) belongs in env/.
"""

from __future__ import annotations

# ============================================================
# DISCOGS
# ============================================================

DEFAULT_DISCOGS_API_URL = "https://api.discogs.com"
DEFAULT_DISCOGS_USER_AGENT = "Discotube/0.1"

# ============================================================
# YOUTUBE: SCOPES / OAUTH
# ============================================================

# playlistItems.insert needs write access; force-ssl is the narrowest scope
YOUTUBE_OAUTH_SCOPES = ["https://www.googleapis.com/auth/youtube.force-ssl"]

OAUTH_SUCCESS_MESSAGE = (
    "Authentication successful! You can close this window and return to the console."
)

# ============================================================
# BACKOFF
# ============================================================

DEFAULT_BACKOFF_BASE_SEC = 20.0
DEFAULT_MAX_ATTEMPTS = 5
