CHAINS = {
    "ethereum": {
        "moralis_chain": "eth",
        "native_symbol": "ETH",
        "native_decimals": 18,
        # Moralis/1inch convention for the chain's own coin
        "native_address": "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
    },
}

DEFAULT_CHAIN = "ethereum"
