from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from db.errors import StudioError
from db.models import PROJECT_STATUSES, PROPOSAL_STATUSES
from db.resources import ResourceClient

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


@dataclass
class DashboardStats:
    consultations: int = 0
    pending_consultations: int = 0
    messages: int = 0
    unread_messages: int = 0
    portfolio_items: int = 0
    testimonials: int = 0
    projects_by_status: Dict[str, int] = field(default_factory=dict)
    proposals_by_status: Dict[str, int] = field(default_factory=dict)
    recent_consultations: List[Dict[str, Any]] = field(default_factory=list)
    recent_messages: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def active_projects(self) -> int:
        return self.projects_by_status.get("pending", 0) + self.projects_by_status.get("in_progress", 0)

    @property
    def open_proposals(self) -> int:
        return self.proposals_by_status.get("draft", 0) + self.proposals_by_status.get("sent", 0)


def load_dashboard_stats(clients: Dict[str, ResourceClient]) -> DashboardStats:
    """Aggregate tiles from count queries plus the latest leads. Stops at the first failure."""
    stats = DashboardStats()
    consultations = clients["consultation_requests"]
    messages = clients["contact_messages"]
    try:
        stats.consultations = consultations.count()
        stats.pending_consultations = consultations.count({"status": "pending"})
        stats.messages = messages.count()
        stats.unread_messages = messages.count({"status": "unread"})
        stats.portfolio_items = clients["portfolio_items"].count()
        stats.testimonials = clients["testimonials"].count()
        stats.projects_by_status = {s: clients["projects"].count({"status": s}) for s in PROJECT_STATUSES}
        stats.proposals_by_status = {s: clients["proposals"].count({"status": s}) for s in PROPOSAL_STATUSES}
        stats.recent_consultations = consultations.list(limit=RECENT_LIMIT)
        stats.recent_messages = messages.list(limit=RECENT_LIMIT)
    except StudioError as e:
        logger.error("Error fetching dashboard data: %s", e.message)
        stats.error = "Some dashboard figures could not be loaded."
    return stats


def render_admin_dashboard(clients: Dict[str, ResourceClient], navigate) -> None:
    stats = load_dashboard_stats(clients)
    if stats.error:
        st.warning(stats.error)

    # --- KPI Metrics ---
    tiles = [
        ("Total Consultations", stats.consultations, f"{stats.pending_consultations} pending", "Consultations"),
        ("Contact Messages", stats.messages, f"{stats.unread_messages} unread", "Messages"),
        ("Portfolio Items", stats.portfolio_items, "Projects showcased", "Portfolio"),
        ("Testimonials", stats.testimonials, "Client reviews", "Testimonials"),
        ("Active Projects", stats.active_projects, f"{sum(stats.projects_by_status.values())} total", "Projects"),
        ("Open Proposals", stats.open_proposals, f"{stats.proposals_by_status.get('accepted', 0)} accepted", "Proposals"),
    ]
    columns = st.columns(3)
    for i, (title, value, subtitle, section) in enumerate(tiles):
        with columns[i % 3]:
            st.metric(title, value)
            st.caption(subtitle)
            if st.button("View", key=f"tile-{section}"):
                navigate(section)

    # --- Project pipeline ---
    st.divider()
    st.subheader("Project Pipeline")
    pipeline = pd.DataFrame(
        {"status": list(stats.projects_by_status), "count": list(stats.projects_by_status.values())}
    )
    if pipeline["count"].sum() > 0:
        fig = px.bar(pipeline, x="status", y="count", color="status")
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No projects yet.")

    # --- Recent leads ---
    left, right = st.columns(2)
    with left:
        st.subheader("Recent Consultations")
        if stats.recent_consultations:
            df = pd.DataFrame(stats.recent_consultations)
            cols = [c for c in ["name", "project_type", "preferred_date", "status"] if c in df.columns]
            st.dataframe(df[cols], use_container_width=True, hide_index=True)
        else:
            st.info("No consultation requests yet.")
    with right:
        st.subheader("Recent Messages")
        if stats.recent_messages:
            df = pd.DataFrame(stats.recent_messages)
            cols = [c for c in ["name", "subject", "status"] if c in df.columns]
            st.dataframe(df[cols], use_container_width=True, hide_index=True)
        else:
            st.info("No messages yet.")
