"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``treestatus_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from treestatus_app.app import main

st.set_page_config(layout="wide")
logger = logging.getLogger(__name__)


def _auto_init_treestatus_service():
    """Initialize the Treestatus service from Streamlit secrets if available."""
    if "treestatus_service" in st.session_state:
        return

    ts_secrets = st.secrets.get("treestatus", {})
    server = ts_secrets.get("TREESTATUS_SERVER") or st.secrets.get("TREESTATUS_SERVER")
    trees = ts_secrets.get("TREES") or st.secrets.get("TREES")

    if server and trees:
        try:
            from treestatus_app.core.service import TreeStatusService
            from treestatus_app.core.treestatus_client import TreestatusAPI

            st.session_state["treestatus_server"] = server
            st.session_state["trees"] = list(trees)
            st.session_state["treestatus_service"] = TreeStatusService(TreestatusAPI(server))
        except Exception as e:
            st.sidebar.error(f"Treestatus setup failed: {e}")
            st.session_state.pop("treestatus_service", None)
    else:
        st.sidebar.info("No Treestatus secrets found. Use the Setup page.")


_auto_init_treestatus_service()

PAGES_DIR = Path(__file__).parent / "treestatus_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"treestatus_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:
        logger.warning("Failed importing page %s: %s", mod_name, e)

if __name__ == "__main__":
    main()
