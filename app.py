import atexit
import logging
import os
import sys
import threading
import traceback

import streamlit as st

# --- IMPORTS & PATHS ---
_APP_DIR = os.path.dirname(os.path.abspath(__file__))
if _APP_DIR not in sys.path:
    sys.path.insert(0, _APP_DIR)

from src.api import UsersAPI
from src.app.context import build_page_context
from src.app.router import render_page
from src.config import AppConfig
from src.lang import STRINGS, get_text
from src.monitor import monitor

# --- CONFIGURATION ---
CONFIG = AppConfig.from_env()


# --- LOGGING ---
def _setup_logging(level):
    logger = logging.getLogger("users_app")
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(fmt)
    logger.addHandler(stream_handler)
    # Handlers outlive reruns, so this branch runs once per process.
    atexit.register(lambda: logger.info("App process exiting"))
    return logger

logger = _setup_logging(CONFIG.log_level)

def _log_exception(prefix, exc_type, exc_value, exc_tb):
    details = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    logger.error("%s: %s", prefix, details)

def _sys_excepthook(exc_type, exc_value, exc_tb):
    if issubclass(exc_type, (SystemExit, KeyboardInterrupt)):
        return
    _log_exception("Unhandled exception", exc_type, exc_value, exc_tb)

def _thread_excepthook(args):
    if issubclass(args.exc_type, SystemExit):
        return
    _log_exception(f"Thread exception in {args.thread.name}", args.exc_type, args.exc_value, args.exc_traceback)

sys.excepthook = _sys_excepthook
threading.excepthook = _thread_excepthook

st.set_page_config(page_title="Users", layout="centered")

# --- INITIALIZATION ---
if 'api_client' not in st.session_state or st.session_state.api_client is None:
    st.session_state.api_client = UsersAPI(CONFIG)
if 'language' not in st.session_state: st.session_state.language = CONFIG.lang

# --- SIDEBAR ---
with st.sidebar:
    languages = list(STRINGS.keys())
    st.session_state.language = st.selectbox(
        "Dil / Language",
        languages,
        index=languages.index(st.session_state.language) if st.session_state.language in languages else 0,
    )
    lang = st.session_state.language
    st.title(get_text(lang, "settings"))
    page = st.radio(get_text(lang, "sidebar_title"), [get_text(lang, "menu_users")])
    st.write("---")
    stats_slot = st.empty()

# --- MAIN LOGIC ---
render_page(
    build_page_context(
        st,
        lang=st.session_state.language,
        api=st.session_state.api_client,
        page=page,
        page_limit=CONFIG.page_limit,
    )
)

# Filled after the page so the numbers include this run's requests.
stats = monitor.get_stats()
with stats_slot.container():
    st.caption(f"{get_text(lang, 'api_stats')}: {stats['total_calls']}")
    st.caption(f"{get_text(lang, 'api_rate')}: {monitor.get_rate_per_minute(minutes=5):.1f}")
    st.caption(f"{get_text(lang, 'api_errors')}: {stats['error_count']}")
