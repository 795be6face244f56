import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

import requests

from utils import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketToken:
    id: str
    symbol: str
    name: str
    image: str
    current_price: float

    @classmethod
    def from_api(cls, item: dict) -> "MarketToken":
        return cls(
            id=item["id"],
            symbol=(item.get("symbol") or "").upper(),
            name=item.get("name") or "",
            image=item.get("image") or "",
            current_price=float(item.get("current_price") or 0),
        )


class MarketTable:
    """
    Price lookup table built from the CoinGecko market-cap listing.

    Written by the loader thread, read by page renders, so every access
    goes through the lock.
    """

    def __init__(self):
        self._tokens: dict[str, MarketToken] = {}
        self._lock = threading.Lock()
        self._ready = False
        self.pages_loaded = 0

    def __len__(self):
        with self._lock:
            return len(self._tokens)

    def upsert_page(self, entries: Iterable[dict | MarketToken]) -> int:
        tokens = [
            e if isinstance(e, MarketToken) else MarketToken.from_api(e)
            for e in entries
        ]

        with self._lock:
            for token in tokens:
                self._tokens[token.id] = token
            self.pages_loaded += 1

        return len(tokens)

    def find_by_symbol(self, symbol: str) -> MarketToken | None:
        # first match wins; tickers are not unique across tokens
        wanted = symbol.lower()
        with self._lock:
            for token in self._tokens.values():
                if token.symbol.lower() == wanted:
                    return token
        return None

    def mark_ready(self):
        self._ready = True

    def is_ready(self) -> bool:
        return self._ready


def fetch_markets_page(page: int, api_key: str | None = None, per_page: int = settings.MARKET_PAGE_SIZE) -> list[dict]:
    r = requests.get(
        f"{settings.COINGECKO_API_BASE}/coins/markets",
        params={
            "vs_currency": "usd",
            "order": "market_cap_desc",
            "per_page": per_page,
            "page": page,
            "locale": "en",
        },
        headers={"x-cg-demo-api-key": api_key or ""},
        timeout=settings.REQUEST_TIMEOUT,
    )
    r.raise_for_status()

    data = r.json()
    if not isinstance(data, list):
        raise ValueError(f"Unexpected market payload for page {page}: {data!r}")
    return data


class BuilderState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SCHEDULED = "scheduled"
    READY = "ready"
    FAILED = "failed"


class MarketTableBuilder:
    """
    Loads pages 1..pages into a MarketTable, one page per attempt.

    FETCHING(page) -> SCHEDULED(page + 1) on success
    FETCHING(page) -> SCHEDULED(page)     on failure
    READY once the last page succeeds, FAILED once a page has failed
    max_attempts times in a row. max_attempts=None retries forever.
    """

    def __init__(
        self,
        table: MarketTable,
        fetch_page: Callable[[int], list[dict]],
        pages: int = settings.MARKET_PAGES,
        delay: float = settings.MARKET_PAGE_DELAY_SECONDS,
        max_attempts: int | None = settings.MARKET_PAGE_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.table = table
        self.fetch_page = fetch_page
        self.pages = pages
        self.delay = delay
        self.max_attempts = max_attempts
        self.sleep = sleep

        self.state = BuilderState.IDLE
        self.page = 1
        self.attempts = 0

    def step(self) -> BuilderState:
        """Run a single fetch attempt for the current page."""
        self.state = BuilderState.FETCHING

        try:
            entries = self.fetch_page(self.page)
            count = self.table.upsert_page(entries)
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            self.attempts += 1
            logger.warning(
                "Error fetching market data page %s (attempt %s): %s",
                self.page, self.attempts, e,
            )
            if self.max_attempts is not None and self.attempts >= self.max_attempts:
                logger.error(
                    "Giving up on market data at page %s; %s tokens loaded",
                    self.page, len(self.table),
                )
                self.state = BuilderState.FAILED
            else:
                self.state = BuilderState.SCHEDULED
            return self.state

        logger.info("Market data page %s loaded (%s tokens)", self.page, count)
        self.attempts = 0

        if self.page >= self.pages:
            self.table.mark_ready()
            self.state = BuilderState.READY
        else:
            self.page += 1
            self.state = BuilderState.SCHEDULED

        return self.state

    def run(self) -> BuilderState:
        while self.step() is BuilderState.SCHEDULED:
            self.sleep(self.delay)
        return self.state

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name="market-table-builder", daemon=True)
        thread.start()
        return thread
