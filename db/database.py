# db/database.py

from supabase import create_client, Client
import streamlit as st

from studio.config import SupabaseConfig


def get_supabase_client(cfg: SupabaseConfig) -> Client:
    """
    Returns a Supabase client cached for the browser session.
    The public anon key is used; row level security on the project
    decides what an anonymous visitor, a user and an admin may touch.
    Auth state lives on the client, so it must not be shared across sessions.
    """

    if "supabase_client" not in st.session_state:
        st.session_state.supabase_client = create_client(cfg.url, cfg.anon_key)

    return st.session_state.supabase_client
