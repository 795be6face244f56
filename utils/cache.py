import streamlit as st


def shared():
    """
    One instance per server process, shared by every browser session.
    Used for long-lived objects such as the market table and its loader thread.
    """
    return st.cache_resource(show_spinner=False)
