import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

MORALIS_API_BASE = "https://deep-index.moralis.io/api/v2"
COINGECKO_API_BASE = "https://api.coingecko.com/api/v3"

MARKET_PAGES = 10
MARKET_PAGE_SIZE = 100
MARKET_PAGE_DELAY_SECONDS = 0.1
# None retries a failing page forever
MARKET_PAGE_MAX_ATTEMPTS = None

MIN_DISPLAY_USD = 10.0
RECENT_ADDRESSES_LIMIT = 5
REQUEST_TIMEOUT = 30

def get_api_key(name: str) -> str | None:
    """Return the key from the environment, or None when unset or blank."""
    value = (os.getenv(name) or "").strip()
    return value or None


def moralis_api_key() -> str | None:
    return get_api_key("MORALIS_API_KEY")


def coingecko_api_key() -> str | None:
    return get_api_key("COINGECKO_API_KEY")


def recent_addresses_file() -> Path | None:
    """Opt-in file for recent addresses; unset keeps them per browser session."""
    path = (os.getenv("RECENT_ADDRESSES_FILE") or "").strip()
    return Path(path).expanduser() if path else None


def hide_possible_spam() -> bool:
    return os.getenv("HIDE_POSSIBLE_SPAM", "false").strip().lower() in ("1", "true", "yes")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
