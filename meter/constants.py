"""
Shared constants used across all meter modules.

Centralises magic numbers, default endpoints, and tunables so they live in
exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    # Compressed bodies would understate the bytes actually moved.
    "Accept-Encoding": "identity",
    "Cache-Control": "no-cache",
}

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

PING_URL = "https://www.google.com/favicon.ico"
DOWNLOAD_URL = (
    "https://images.unsplash.com/photo-1481349518771-20055b2a7b24"
    "?q=80&w=2000&auto=format&fit=crop"
)
DOWNLOAD_SIZE = 5_000_000        # approx. bytes served by DOWNLOAD_URL
NETWORK_INFO_URL = "https://ipapi.co/json/"
CACHE_BUST_PARAM = "cache"

# ---------------------------------------------------------------------------
# Connection limits
# ---------------------------------------------------------------------------

MIN_CONNECTIONS = 1
MAX_CONNECTIONS = 32
DEFAULT_CONNECTIONS = 4

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

DEFAULT_PING_COUNT = 5
MIN_PING_COUNT = 1
MAX_PING_COUNT = 100

DEFAULT_TIME_BUDGET = 6.0        # seconds for the throughput phase
MIN_TIME_BUDGET = 1.0
MAX_TIME_BUDGET = 300.0

DEFAULT_PROBE_TIMEOUT = 15.0     # seconds of socket inactivity per probe

RAMP_STEPS = 20
RAMP_INTERVAL = 0.05             # 50 ms between display ramp ticks

MONITOR_INTERVAL = 5.0           # connectivity check period

# ---------------------------------------------------------------------------
# Retention
# ---------------------------------------------------------------------------

HISTORY_KEY = "netdash_history"
HISTORY_LIMIT = 10
LOG_LIMIT = 50

# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

BITS_PER_MEGABIT = 1024 * 1024
