"""
cygaz/core/config.py
═══════════════════════════════════════════════════════════════════════════════
Process configuration, read once from the environment at import time.

  TIMEOUT           upstream fetch timeout in milliseconds     (600000)
  HOST / PORT       bind address for uvicorn                   (0.0.0.0:8080)
  REFRESH_INTERVAL  seconds between scheduler ticks            (1800)
  WARM_UP           tick once immediately at startup           (true)
  RETRY_AFTER       seconds hinted to readers of a cold key    (5)
  LOG_LEVEL         root log level                             (INFO)
  CORS_ORIGINS      comma separated list of allowed origins    (*)

Malformed values raise ValueError at import, i.e. at process start.
═══════════════════════════════════════════════════════════════════════════════
"""

import os

import pytz

VERSION = "0.1.36"

CYPRUS_TZ = pytz.timezone("Asia/Nicosia")


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


# ── Runtime ───────────────────────────────────────────────────────────────────
TIMEOUT_MS         = _env_int("TIMEOUT", 600_000, minimum=1)
TIMEOUT_S          = TIMEOUT_MS / 1000.0
HOST               = os.environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0"
PORT               = _env_int("PORT", 8080, minimum=1)
if PORT > 65535:
    raise ValueError(f"PORT must be <= 65535, got {PORT}")
REFRESH_INTERVAL_S = _env_int("REFRESH_INTERVAL", 30 * 60, minimum=1)
WARM_UP            = _env_bool("WARM_UP", True)
RETRY_AFTER_S      = _env_int("RETRY_AFTER", 5, minimum=1)
LOG_LEVEL          = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
CORS_ORIGINS       = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

# ── Upstream: Ministry of Energy petroleum prices e-form ──────────────────────
PETROLEUM_PRICES_ENDPOINT = "https://eforms.eservices.cyprus.gov.cy/MCIT/MCIT/PetroleumPrices"
# Agent string the e-form has always been scraped with.
USER_AGENT        = "Mozilla/4.0 (compatible; MSIE 8.0; Windows NT 6.1; Trident/4.0)"
TOKEN_FIELD       = "__RequestVerificationToken"
TOKEN_SELECTOR    = f'input[name="{TOKEN_FIELD}"]'
PRICES_SELECTOR   = "#petroleumPriceDetailsFootable"
OFFLINE_CLASS     = "isOffLine"
