"""
Monitor Service Configuration
=============================

Configuration for the Solcerer alert monitor (tracked posts, price alerts,
whale moves).
"""

import os
from pathlib import Path

# Load .env file from project root
from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

# =============================================================================
# POLLING LOOPS
# =============================================================================
# Each source type runs its own loop. Startup delays are staggered so the
# three loops don't hit their upstreams at the same moment.

SOCIAL_POLL_INTERVAL_SECONDS = 60
PRICE_POLL_INTERVAL_SECONDS = 60
WHALE_POLL_INTERVAL_SECONDS = 120

SOCIAL_STARTUP_DELAY_SECONDS = 10
PRICE_STARTUP_DELAY_SECONDS = 15
WHALE_STARTUP_DELAY_SECONDS = 20

# Pause before each entity inside a tick (rate limiting upstreams)
SOCIAL_FETCH_DELAY_SECONDS = 2.0
PRICE_FETCH_DELAY_SECONDS = 0.5
WHALE_FETCH_DELAY_SECONDS = 1.0

# Unique keys processed per tick
SOCIAL_MAX_HANDLES = 10
WHALE_MAX_MINTS = 20

# =============================================================================
# DEDUP / ALERT THRESHOLDS
# =============================================================================

# Max new events delivered per entity per tick (oldest first)
MAX_EMISSIONS_PER_TICK = 5

# Transfers worth at least this much (USD) are whale moves
WHALE_THRESHOLD_USD = 10_000

# Recent transactions fetched per mint
WHALE_TRANSACTION_LIMIT = 20

# =============================================================================
# BROWSER SETTINGS (X / Twitter)
# =============================================================================

HEADLESS_MODE = True
NAVIGATION_TIMEOUT_MS = 30_000
CONTENT_WAIT_TIMEOUT_MS = 15_000
SETTLE_DELAY_MS = 5_000
SCROLL_CYCLES = 2
SCROLL_DELAY_MS = 2_000
MAX_POSTS_PER_FETCH = 10

# Session cookies from a logged-in browser (set via environment)
X_AUTH_TOKEN = os.environ.get("X_AUTH_TOKEN", "")
X_CT0 = os.environ.get("X_CT0", "")

# =============================================================================
# UPSTREAM APIS
# =============================================================================

DEXSCREENER_URL = "https://api.dexscreener.com/latest/dex/tokens"
HELIUS_API_URL = "https://api.helius.xyz/v0"
HELIUS_API_KEY = os.environ.get("HELIUS_API_KEY", "")
HTTP_TIMEOUT_SECONDS = 15

# =============================================================================
# DISCORD SETTINGS
# =============================================================================

# One webhook per alert category (set via environment)
DISCORD_WEBHOOK_TRACKED_POSTS = os.environ.get("DISCORD_WEBHOOK_TRACKED_POSTS", "")
DISCORD_WEBHOOK_PRICE_ALERTS = os.environ.get("DISCORD_WEBHOOK_PRICE_ALERTS", "")
DISCORD_WEBHOOK_WHALE_MOVES = os.environ.get("DISCORD_WEBHOOK_WHALE_MOVES", "")

# Pause between messages in the same tick
DELIVERY_PACING_SECONDS = 1.0

# Embed description limit is 4096
MAX_DESCRIPTION_LENGTH = 4000

# =============================================================================
# DATA PATHS
# =============================================================================

DB_PATH = _project_root / "data" / "monitor.db"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = "INFO"
LOG_FILE = "logs/monitor.log"
LOG_RETENTION_DAYS = 7


def get_webhook_urls() -> dict:
    """
    Get the configured webhook URL for each alert category.

    Returns:
        Dict mapping category value ("tracked_posts", "price_alerts",
        "whale_moves") to webhook URL (may be empty).
    """
    return {
        "tracked_posts": DISCORD_WEBHOOK_TRACKED_POSTS,
        "price_alerts": DISCORD_WEBHOOK_PRICE_ALERTS,
        "whale_moves": DISCORD_WEBHOOK_WHALE_MOVES,
    }
