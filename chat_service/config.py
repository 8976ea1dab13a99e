"""
Environment driven settings for the random chat service
"""
import os

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Seconds between platform stats log lines. 0 disables the reporter.
STATS_INTERVAL_SEC = float(os.environ.get("STATS_INTERVAL_SEC", "30"))

# Outbound events buffered per participant before new ones are dropped
OUTBOX_MAX_SIZE = int(os.environ.get("OUTBOX_MAX_SIZE", "256"))

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]
