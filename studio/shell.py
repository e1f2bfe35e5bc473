from __future__ import annotations

from enum import Enum
from typing import Callable

import streamlit as st

from studio.session import SessionProvider


HOME = "Home"
SIGN_IN = "Sign In"
PUBLIC_PAGES = ["Home", "About", "Services", "Portfolio", "Gallery", "Consultancy", "Contact"]

ADMIN_PREFIX = "admin/"
ADMIN_SECTIONS = [
    ("Dashboard", "📊"),
    ("Consultations", "📅"),
    ("Messages", "✉️"),
    ("Portfolio", "🖼️"),
    ("Gallery", "🎞️"),
    ("Services", "🛠️"),
    ("Team", "👥"),
    ("Testimonials", "💬"),
    ("Projects", "📁"),
    ("Proposals", "📄"),
    ("Users", "🔐"),
]


class Access(str, Enum):
    LOADING = "loading"
    SIGN_IN = "sign_in"
    HOME = "home"
    ALLOW = "allow"


def resolve_access(session: SessionProvider, require_admin: bool = True) -> Access:
    if session.is_loading:
        return Access.LOADING
    if session.identity is None:
        return Access.SIGN_IN
    if require_admin and session.role != "admin":
        return Access.HOME
    return Access.ALLOW


def admin_route(section: str) -> str:
    return ADMIN_PREFIX + section


def is_admin_route(route: str) -> bool:
    return route.startswith(ADMIN_PREFIX)


def current_route() -> str:
    return st.session_state.get("route", HOME)


def navigate(route: str) -> None:
    st.session_state.route = route
    st.rerun()


# ---------------- CHROME ----------------

def render_public_sidebar(session: SessionProvider, site_name: str) -> None:
    route = current_route()
    with st.sidebar:
        st.title(site_name)
        for page in PUBLIC_PAGES:
            if st.button(page, key=f"nav-{page}", use_container_width=True,
                         type="primary" if route == page else "secondary"):
                navigate(page)
        st.divider()
        if session.is_admin:
            if st.button("Admin Panel", key="nav-admin", use_container_width=True):
                navigate(admin_route("Dashboard"))
        if session.identity is None:
            if st.button(SIGN_IN, key="nav-sign-in", use_container_width=True):
                navigate(SIGN_IN)
        else:
            st.caption(session.identity.email)
            if st.button("Sign Out", key="nav-sign-out", use_container_width=True):
                session.sign_out()
                navigate(HOME)


def render_admin_shell(
    session: SessionProvider,
    section: str,
    render_body: Callable[[], None],
    site_name: str,
    require_admin: bool = True,
) -> None:
    """Gate an admin section, then draw sidebar, top bar and the section body."""
    access = resolve_access(session, require_admin)
    if access is Access.LOADING:
        st.info("Loading...")
        return
    if access is Access.SIGN_IN:
        navigate(SIGN_IN)
    if access is Access.HOME:
        navigate(HOME)

    with st.sidebar:
        st.title(site_name)
        st.caption("ADMIN PANEL")
        for name, icon in ADMIN_SECTIONS:
            if st.button(f"{icon} {name}", key=f"admin-nav-{name}", use_container_width=True,
                         type="primary" if name == section else "secondary"):
                navigate(admin_route(name))
        st.divider()
        if st.button("🏠 Back to Website", key="admin-nav-home", use_container_width=True):
            navigate(HOME)
        if st.button("↪️ Sign Out", key="admin-nav-sign-out", use_container_width=True):
            session.sign_out()
            navigate(HOME)

    # --- Top bar ---
    left, right = st.columns([3, 1])
    with right:
        badge = ":orange-background[Admin]" if session.is_admin else ":gray-background[User Access]"
        st.markdown(f"{badge}  \n**{session.identity.email}**")
    with left:
        st.title(section)

    render_body()
