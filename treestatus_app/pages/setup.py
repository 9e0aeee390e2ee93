"""Connection setup page: choose the Treestatus server and initialize the service."""

from __future__ import annotations

import streamlit as st

from treestatus_app.app import register_page
from treestatus_app.core.config import DEFAULT_TREES, FETCH_TIMEOUT_SECONDS, TREESTATUS_DEFAULT_SERVER
from treestatus_app.core.service import TreeStatusService
from treestatus_app.core.treestatus_client import TreestatusAPI


@register_page("Setup / Connection")
def setup_page():
    st.title("Treestatus Connection Setup")
    st.caption("The Treestatus log endpoint is public; no credentials are needed.")

    ts_secrets = st.secrets.get("treestatus", {})
    secret_server = ts_secrets.get("TREESTATUS_SERVER") or st.secrets.get("TREESTATUS_SERVER")

    server = st.text_input(
        "Treestatus Server URL",
        value=st.session_state.get("treestatus_server") or secret_server or TREESTATUS_DEFAULT_SERVER,
    )
    trees = st.multiselect(
        "Trees",
        options=list(DEFAULT_TREES),
        default=st.session_state.get("trees") or [DEFAULT_TREES[0]],
    )
    timeout = st.number_input(
        "Request timeout (seconds)", min_value=5, max_value=600, value=int(FETCH_TIMEOUT_SECONDS)
    )
    ttl = st.number_input("Client cache TTL (seconds)", min_value=60, max_value=3600, value=300)
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not server or not trees:
            st.error("Server and at least one tree required.")
            return
        try:
            api = TreestatusAPI(server, timeout=float(timeout), cache_ttl=float(ttl))
            st.session_state["treestatus_server"] = server
            st.session_state["trees"] = trees
            st.session_state["treestatus_service"] = TreeStatusService(api)
            st.session_state.pop("tree_logs", None)
            st.success("Connection initialized.")
        except Exception as e:
            st.error(f"Failed to initialize Treestatus client: {e}")

    if "treestatus_service" in st.session_state:
        st.info("TreeStatusService ready.")
