import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import requests

from data.errors import BalanceFetchError, RateLimitError
from utils import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawTokenBalance:
    token_address: str
    symbol: str
    name: str
    decimals: int
    balance: str
    thumbnail: str | None = None
    possible_spam: bool = False

    @classmethod
    def from_api(cls, item: dict) -> "RawTokenBalance":
        return cls(
            token_address=item.get("token_address") or "",
            symbol=item.get("symbol") or "",
            name=item.get("name") or "",
            decimals=int(item.get("decimals") or 0),
            balance=str(item.get("balance") or "0"),
            thumbnail=item.get("thumbnail") or item.get("logo"),
            possible_spam=bool(item.get("possible_spam")),
        )


@dataclass(frozen=True)
class WalletBalances:
    address: str
    native_balance: str
    tokens: list[RawTokenBalance] = field(default_factory=list)


def _error_from_response(resp: requests.Response) -> BalanceFetchError:
    if resp.status_code == 429:
        return RateLimitError()

    message = None
    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message")

    return BalanceFetchError(
        message or f"Request failed with status code {resp.status_code}",
        status_code=resp.status_code,
    )


def _moralis_get(path: str, api_key: str, chain: str):
    try:
        resp = requests.get(
            f"{settings.MORALIS_API_BASE}{path}",
            params={"chain": chain},
            headers={"X-API-Key": api_key},
            timeout=settings.REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise BalanceFetchError(str(e)) from e

    if resp.status_code != 200:
        raise _error_from_response(resp)

    try:
        return resp.json()
    except ValueError as e:
        raise BalanceFetchError(str(e)) from e


def get_native_balance(address: str, api_key: str, chain: str = "eth") -> str:
    """Raw native balance in wei, as a decimal string."""
    data = _moralis_get(f"/{address}/balance", api_key, chain)
    if not isinstance(data, dict):
        raise BalanceFetchError()

    balance = str(data.get("balance") or "0")
    if not balance.isdigit():
        raise BalanceFetchError(f"Unexpected native balance: {balance}")
    return balance


def get_erc20_balances(address: str, api_key: str, chain: str = "eth") -> list[RawTokenBalance]:
    data = _moralis_get(f"/{address}/erc20", api_key, chain)
    if not isinstance(data, list):
        raise BalanceFetchError()

    try:
        return [RawTokenBalance.from_api(item) for item in data]
    except (ValueError, TypeError, AttributeError) as e:
        raise BalanceFetchError(str(e)) from e


def get_wallet_balances(address: str, api_key: str, chain: str = "eth") -> WalletBalances:
    """
    Native and ERC-20 balances, requested in parallel.
    Either request failing fails the whole call.
    """
    with ThreadPoolExecutor(max_workers=2) as ex:
        native = ex.submit(get_native_balance, address, api_key, chain)
        tokens = ex.submit(get_erc20_balances, address, api_key, chain)

        try:
            native_balance = native.result()
            token_balances = tokens.result()
        except BalanceFetchError as e:
            logger.error("Error fetching balances for %s: %s", address, e)
            raise

    logger.info("Fetched %s token balances for %s", len(token_balances), address)
    return WalletBalances(
        address=address,
        native_balance=native_balance,
        tokens=token_balances,
    )
