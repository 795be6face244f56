import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from web3 import Web3

from data.balances import WalletBalances, get_wallet_balances
from data.errors import EmptyAddressError, InvalidAddressError, MissingApiKeyError
from data.markets import MarketTable
from utils import settings
from utils.chains import CHAINS, DEFAULT_CHAIN

logger = logging.getLogger(__name__)

_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]+$")


@dataclass(frozen=True)
class DisplayTokenBalance:
    token_address: str
    name: str
    symbol: str
    thumbnail: str | None
    decimals: int
    balance: float
    usd_price: float

    @property
    def usd_value(self) -> float:
        return self.balance * self.usd_price


@dataclass(frozen=True)
class Portfolio:
    address: str
    all_balances: list[DisplayTokenBalance]
    balances: list[DisplayTokenBalance]
    total_value: float


def is_valid_address(address: str) -> bool:
    if not address:
        return False
    if not _HEX_ADDRESS.match(address):
        return False
    return len(address) == 42


def to_decimal_amount(raw: str, decimals: int) -> float:
    try:
        return float(Decimal(raw) / (Decimal(10) ** decimals))
    except InvalidOperation:
        logger.warning("Malformed raw balance %r, treating as 0", raw)
        return 0.0


def join_balances(wallet: WalletBalances, table: MarketTable, chain: str = DEFAULT_CHAIN, hide_spam: bool = False) -> list[DisplayTokenBalance]:
    """
    Price every raw balance against the market table by symbol.
    Tokens (and the native coin) without a market entry are dropped.
    """
    cfg = CHAINS[chain]
    rows = []

    for token in wallet.tokens:
        if not token.symbol:
            continue
        if hide_spam and token.possible_spam:
            continue

        info = table.find_by_symbol(token.symbol)
        if info is None:
            logger.debug("No market entry for %s, skipping", token.symbol)
            continue

        rows.append(DisplayTokenBalance(
            token_address=token.token_address,
            name=token.name,
            symbol=token.symbol,
            thumbnail=info.image or token.thumbnail,
            decimals=token.decimals,
            balance=to_decimal_amount(token.balance, token.decimals),
            usd_price=info.current_price,
        ))

    native = table.find_by_symbol(cfg["native_symbol"])
    if native is not None:
        rows.append(DisplayTokenBalance(
            token_address=cfg["native_address"],
            name=native.name,
            symbol=native.symbol,
            thumbnail=native.image,
            decimals=cfg["native_decimals"],
            balance=float(Web3.from_wei(int(wallet.native_balance), "ether")),
            usd_price=native.current_price,
        ))

    return rows


def build_portfolio(address: str, rows: list[DisplayTokenBalance], min_usd: float = settings.MIN_DISPLAY_USD) -> Portfolio:
    all_balances = sorted(rows, key=lambda r: r.usd_value, reverse=True)

    return Portfolio(
        address=address,
        all_balances=all_balances,
        balances=[r for r in all_balances if r.usd_value >= min_usd],
        total_value=sum(r.usd_value for r in all_balances),
    )


def load_portfolio(address, api_key, table, recent=None, fetch=get_wallet_balances, chain=DEFAULT_CHAIN, hide_spam=False) -> Portfolio:
    """
    Validate input, remember the address, fetch balances and price them.

    Input problems raise InputError subclasses before any request is sent;
    request problems raise BalanceFetchError.
    """
    if not address:
        raise EmptyAddressError()
    if not api_key:
        raise MissingApiKeyError()
    if not is_valid_address(address):
        raise InvalidAddressError(address)

    if recent is not None:
        recent.add(address)

    wallet = fetch(address, api_key, CHAINS[chain]["moralis_chain"])
    rows = join_balances(wallet, table, chain, hide_spam=hide_spam)

    if not table.is_ready():
        logger.info("Priced %s against a partial market table (%s tokens)", address, len(table))

    return build_portfolio(address, rows)
