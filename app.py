import logging
from functools import partial

import streamlit as st

from data.errors import BalanceFetchError, InputError
from data.markets import BuilderState, MarketTable, MarketTableBuilder, fetch_markets_page
from data.portfolio import load_portfolio
from data.recent import recent_store
from utils import settings
from utils.cache import shared
from utils.formatting import amount, price, usd

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@shared()
def market_loader() -> MarketTableBuilder:
    builder = MarketTableBuilder(
        MarketTable(),
        partial(fetch_markets_page, api_key=settings.coingecko_api_key()),
    )
    builder.start()
    return builder


st.set_page_config(page_title="Wallet Balances", layout="wide")

st.markdown(
    "<p style='text-align:center;font-style:italic;font-size:1.25rem'>"
    "\"Not your keys, not your coins.\"</p>",
    unsafe_allow_html=True,
)
st.caption("Always ensure your wallet security and never share your private keys.")

loader = market_loader()
if loader.state is BuilderState.FAILED:
    market_loader.clear()
    loader = market_loader()

table = loader.table
recent = recent_store(st.session_state)

for key, default in (("address", ""), ("portfolio", None), ("error", None), ("show_all", False)):
    st.session_state.setdefault(key, default)


def _pick_recent():
    picked = st.session_state.get("recent_pick")
    if picked:
        st.session_state.address = picked


def _check_balance():
    try:
        portfolio = load_portfolio(
            st.session_state.address.strip(),
            settings.moralis_api_key(),
            table,
            recent=recent,
            hide_spam=settings.hide_possible_spam(),
        )
    except InputError as e:
        st.session_state.error = str(e)
        return
    except BalanceFetchError as e:
        st.session_state.error = f"Error: {e}"
        st.session_state.portfolio = None
        return

    st.session_state.error = None
    st.session_state.portfolio = portfolio
    st.session_state.show_all = False


# --------------------
# Input
# --------------------
col_input, col_button = st.columns([5, 1], vertical_alignment="bottom")

with col_input:
    st.text_input(
        "Wallet address",
        key="address",
        placeholder="Enter EVM wallet address (0x...)",
    )
    saved = recent.load()
    if saved:
        st.selectbox(
            "Recent addresses",
            saved,
            index=None,
            key="recent_pick",
            placeholder="Pick a recent address",
            on_change=_pick_recent,
        )

with col_button:
    st.button("Check Balance", on_click=_check_balance, width="stretch")

if st.session_state.error:
    st.error(st.session_state.error)

if not table.is_ready():
    st.caption(
        f"Loading market data... {table.pages_loaded}/{loader.pages} pages "
        f"({len(table)} tokens)"
    )

# --------------------
# Holdings
# --------------------
portfolio = st.session_state.portfolio

if portfolio is not None and portfolio.all_balances:
    shown = portfolio.all_balances if st.session_state.show_all else portfolio.balances

    rows = [
        {
            "Logo": token.thumbnail,
            "Token": token.symbol,
            "Price": price(token.usd_price),
            "Amount": amount(token.balance),
            "USD Value": usd(token.usd_value),
        }
        for token in shown
    ]

    st.dataframe(
        rows,
        width="stretch",
        hide_index=True,
        column_config={"Logo": st.column_config.ImageColumn("", width="small")},
    )

    col_caption, col_toggle = st.columns([4, 1])
    with col_caption:
        st.caption(
            "Showing all tokens"
            if st.session_state.show_all
            else "Tokens with small balances are not displayed."
        )
    with col_toggle:
        st.toggle("Show all", key="show_all")

    st.metric("Total Value", usd(portfolio.total_value))
