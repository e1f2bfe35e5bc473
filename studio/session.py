from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import streamlit as st

from db.errors import StudioError
from db.models import DEFAULT_ROLE, ROLES
from db.resources import ResourceClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


def _identity_from_user(user) -> Optional[Identity]:
    if user is None:
        return None
    return Identity(id=str(user.id), email=user.email or "")


# ---------------- AUTH COLLABORATOR ----------------

class SupabaseAuth:
    """Adapts `client.auth` to the calls the session provider makes."""

    def __init__(self, client):
        self.client = client

    def get_current_identity(self) -> Optional[Identity]:
        response = self.client.auth.get_user()
        return _identity_from_user(response.user if response else None)

    def on_identity_change(self, callback: Callable[[Optional[Identity]], None]) -> Callable[[], None]:
        def _listener(event, session):
            callback(_identity_from_user(session.user) if session else None)

        subscription = self.client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    def sign_out(self) -> None:
        self.client.auth.sign_out()

    def sign_in(self, email: str, password: str) -> Optional[Identity]:
        response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        return _identity_from_user(response.user)

    def sign_up(self, email: str, password: str, full_name: str = "") -> Optional[Identity]:
        response = self.client.auth.sign_up(
            {"email": email, "password": password, "options": {"data": {"full_name": full_name}}}
        )
        return _identity_from_user(response.user)


# ---------------- SESSION PROVIDER ----------------

class SessionProvider:
    """
    Holds who is signed in and what they may do.

    Lifecycle is init -> (change notifications) -> teardown. Until init has
    resolved the first identity `is_loading` stays True and role gated UI
    must not render.
    """

    def __init__(self, auth, roles: ResourceClient):
        self.auth = auth
        self.roles = roles
        self.identity: Optional[Identity] = None
        self.role: str = DEFAULT_ROLE
        self.is_loading = True
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_admin(self) -> bool:
        return self.identity is not None and self.role == "admin"

    def init(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.on_identity_change(self._apply)
        try:
            identity = self.auth.get_current_identity()
        except Exception:
            logger.exception("Could not resolve current identity")
            identity = None
        self._apply(identity)
        self.is_loading = False

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def sign_in(self, email: str, password: str) -> Optional[Identity]:
        """Errors from the auth collaborator propagate; the sign in page reports them."""
        identity = self.auth.sign_in(email, password)
        self._apply(identity)
        return identity

    def sign_up(self, email: str, password: str, full_name: str = "") -> Optional[Identity]:
        """Creates the account only. The visitor signs in after confirming their email."""
        return self.auth.sign_up(email, password, full_name)

    def sign_out(self) -> None:
        try:
            self.auth.sign_out()
        except Exception:
            logger.exception("Sign out request failed")
        self.identity = None
        self.role = DEFAULT_ROLE

    def _apply(self, identity: Optional[Identity]) -> None:
        self.identity = identity
        self.role = self._resolve_role(identity) if identity else DEFAULT_ROLE

    def _resolve_role(self, identity: Identity) -> str:
        try:
            rows = self.roles.list(filters={"user_id": identity.id}, limit=1)
        except StudioError:
            logger.warning("Role lookup failed for %s, using %s", identity.id, DEFAULT_ROLE)
            return DEFAULT_ROLE
        if rows and rows[0].get("role") in ROLES:
            return rows[0]["role"]
        return DEFAULT_ROLE


def get_session_provider(client, roles: ResourceClient) -> SessionProvider:
    """One provider per browser session, initialised on first use."""
    if "session_provider" not in st.session_state:
        provider = SessionProvider(SupabaseAuth(client), roles)
        provider.init()
        st.session_state.session_provider = provider
    return st.session_state.session_provider
