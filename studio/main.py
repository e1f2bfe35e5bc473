from __future__ import annotations

import logging
import os
import sys

# --- Add project root to sys.path ---
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

import streamlit as st

# IMPORTS
from db.database import get_supabase_client
from db.resources import build_clients
from studio import public_pages
from studio.admin_dashboard import render_admin_dashboard
from studio.admin_pages import ADMIN_RENDERERS, flush_actions, leave_screens, render_users
from studio.auth_page import render_auth_page
from studio.config import load_config
from studio.session import get_session_provider
from studio.shell import (
    SIGN_IN,
    admin_route,
    current_route,
    is_admin_route,
    navigate,
    render_admin_shell,
    render_public_sidebar,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# --- CSS STYLING ---
def inject_custom_css():
    st.markdown("""
    <style>
        /* --- Warm palette for headings and primary buttons --- */
        h1, h2, h3 { font-family: Georgia, 'Times New Roman', serif; }
        .stButton button[kind="primary"] {
            background-color: #b8925a;
            border-color: #b8925a;
        }
        .stButton button[kind="primary"]:hover {
            background-color: #a07d4b;
            border-color: #a07d4b;
        }

        /* --- Hide Streamlit footer for clean look --- */
        footer {visibility: hidden;}
    </style>
    """, unsafe_allow_html=True)


def main():
    cfg = load_config()
    st.set_page_config(
        page_title=cfg.site.name,
        page_icon="🏛️",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    inject_custom_css()

    client = get_supabase_client(cfg.supabase)
    clients = build_clients(client)
    session = get_session_provider(client, clients["user_roles"])

    route = current_route()

    if is_admin_route(route):
        section = route[len(admin_route("")):]
        run_admin_section(section, clients, session, cfg)
        return

    leave_screens()
    render_public_sidebar(session, cfg.site.name)
    if route == SIGN_IN:
        render_auth_page(session, navigate)
    elif route == "About":
        public_pages.render_about(clients, cfg.site)
    elif route == "Services":
        public_pages.render_services(clients)
    elif route == "Portfolio":
        public_pages.render_portfolio(clients)
    elif route == "Gallery":
        public_pages.render_gallery(clients)
    elif route == "Consultancy":
        public_pages.render_consultancy(clients)
    elif route == "Contact":
        public_pages.render_contact(clients)
    else:
        public_pages.render_home(clients, cfg.site, navigate)


def run_admin_section(section, clients, session, cfg):
    def body():
        if section == "Dashboard":
            leave_screens()
            render_admin_dashboard(clients, lambda name: navigate(admin_route(name)))
        elif section == "Users":
            render_users(clients, current_user_id=session.identity.id)
        elif section in ADMIN_RENDERERS:
            ADMIN_RENDERERS[section](clients)
        else:
            navigate(admin_route("Dashboard"))

    render_admin_shell(session, section, body, cfg.site.name)
    flush_actions()


if __name__ == "__main__":
    main()
