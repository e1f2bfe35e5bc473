from __future__ import annotations

from dataclasses import dataclass
import streamlit as st


# ---------------------- DATA CLASSES ----------------------

@dataclass
class SupabaseConfig:
    url: str
    anon_key: str  # public key; row level security does the gating


@dataclass
class SiteConfig:
    name: str = "Beyond House"
    tagline: str = "Interior Design & Construction"


@dataclass
class AppConfig:
    supabase: SupabaseConfig
    site: SiteConfig


# ---------------------- LOADING ----------------------

def load_config(secrets=None) -> AppConfig:
    secrets = st.secrets if secrets is None else secrets

    # --- Supabase ---
    # Older secrets files only carry service_key, accept it as the key name
    supabase = secrets["supabase"]
    if "anon_key" in supabase:
        key = supabase["anon_key"]
    else:
        key = supabase["service_key"]

    supabase_cfg = SupabaseConfig(url=supabase["url"], anon_key=key)

    # --- Site ---
    site = secrets["site"] if "site" in secrets else {}
    site_cfg = SiteConfig(
        name=site.get("name", SiteConfig.name),
        tagline=site.get("tagline", SiteConfig.tagline),
    )

    return AppConfig(supabase=supabase_cfg, site=site_cfg)
