from __future__ import annotations

import logging

import streamlit as st

from studio.intake import validate_email
from studio.session import SessionProvider

logger = logging.getLogger(__name__)


def render_auth_page(session: SessionProvider, navigate) -> None:
    st.title("Welcome")
    if session.identity is not None:
        st.success(f"Signed in as {session.identity.email}")
        if st.button("Go to Admin Panel" if session.is_admin else "Back to Website"):
            navigate("admin/Dashboard" if session.is_admin else "Home")
        return

    sign_in, sign_up = st.tabs(["Sign In", "Create Account"])

    with sign_in:
        with st.form("sign-in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary")
        if submitted:
            if not email.strip() or not password:
                st.error("Please enter your email and password.")
            else:
                try:
                    session.sign_in(email.strip(), password)
                except Exception as e:
                    logger.warning("Sign in failed for %s: %s", email, e)
                    st.error("Invalid email or password.")
                else:
                    navigate("admin/Dashboard" if session.is_admin else "Home")

    with sign_up:
        with st.form("sign-up"):
            full_name = st.text_input("Full name")
            new_email = st.text_input("Email", key="sign-up-email")
            new_password = st.text_input("Password", type="password", key="sign-up-password")
            created = st.form_submit_button("Create Account")
        if created:
            if not validate_email(new_email.strip()):
                st.error("Invalid email. Please try format: name@example.com")
            elif len(new_password) < 6:
                st.error("Password must be at least 6 characters.")
            else:
                try:
                    session.sign_up(new_email.strip(), new_password, full_name.strip())
                except Exception as e:
                    logger.warning("Sign up failed for %s: %s", new_email, e)
                    st.error("Could not create the account. Please try again.")
                else:
                    st.success("Account created. Check your inbox to confirm your email, then sign in.")
