import pytest

from data.markets import MarketTable


@pytest.fixture
def market_table():
    table = MarketTable()
    table.upsert_page([
        {"id": "ethereum", "symbol": "eth", "name": "Ethereum", "image": "eth.png", "current_price": 2000.0},
        {"id": "usd-coin", "symbol": "usdc", "name": "USDC", "image": "usdc.png", "current_price": 1.0},
        {"id": "chainlink", "symbol": "link", "name": "Chainlink", "image": "link.png", "current_price": 5.0},
    ])
    return table
