# db/models.py
"""
Supabase does not require ORM model classes; rows travel as plain dicts.
Tables managed from the Supabase dashboard:

consultation_requests  name, email, phone, preferred_date, project_type,
                       message, status, notes, created_at, updated_at
contact_messages       name, email, phone, subject, message, status, created_at
portfolio_items        title, category, description, image_url, featured
gallery_items          title, description, media_url, media_type, category,
                       display_order
services               title, subtitle, description, image_url,
                       features (text[]), display_order
team_members           full_name, role, bio, photo_url, video_url, email,
                       phone, is_leader, display_order
testimonials           name, role, content, rating, featured
projects               title, client_name, client_email, client_phone,
                       description, status, budget, start_date, end_date,
                       assigned_team_member_id (→ team_members.id), notes
proposals              title, client_name, client_email, client_phone,
                       description, estimated_budget, status, valid_until, notes
profiles               id (= auth user id), email, full_name
user_roles             user_id, role ('admin' | 'user'), created by a signup trigger

Every table has an uuid `id` and server-assigned timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple, get_args

from db.errors import ValidationError


ConsultationStatus = Literal["pending", "contacted", "scheduled", "completed", "cancelled"]
MessageStatus = Literal["unread", "read", "replied"]
ProjectStatus = Literal["pending", "in_progress", "completed", "cancelled"]
ProposalStatus = Literal["draft", "sent", "accepted", "rejected"]
MediaType = Literal["image", "video"]
Role = Literal["admin", "user"]

CONSULTATION_STATUSES: Tuple[str, ...] = get_args(ConsultationStatus)
MESSAGE_STATUSES: Tuple[str, ...] = get_args(MessageStatus)
PROJECT_STATUSES: Tuple[str, ...] = get_args(ProjectStatus)
PROPOSAL_STATUSES: Tuple[str, ...] = get_args(ProposalStatus)
MEDIA_TYPES: Tuple[str, ...] = get_args(MediaType)
ROLES: Tuple[str, ...] = get_args(Role)

DEFAULT_ROLE: Role = "user"

PORTFOLIO_CATEGORIES = ["Living Spaces", "Kitchen", "Bedrooms", "Bathrooms", "Commercial", "Entryways"]

GALLERY_CATEGORIES = {
    "living-room": "Living Room",
    "bedroom": "Bedroom",
    "kitchen": "Kitchen",
    "bathroom": "Bathroom",
    "office": "Office",
    "outdoor": "Outdoor",
    "general": "General",
}

PROJECT_TYPES = {
    "ceiling": "Ceiling Design",
    "cabinetry": "Custom Cabinetry",
    "walls": "Walls & Décor",
    "floors": "Flooring Solutions",
    "full": "Full Interior Renovation",
    "consultation": "Design Consultation Only",
}


@dataclass(frozen=True)
class TableSpec:
    table: str
    label: str
    required: Tuple[str, ...] = ()
    order_by: str = "created_at"
    descending: bool = True
    status_field: Optional[str] = None
    statuses: Tuple[str, ...] = ()
    search_fields: Tuple[str, ...] = ()
    toggle_fields: Tuple[str, ...] = ()
    bucket: Optional[str] = None
    media_fields: Tuple[str, ...] = ()
    key: str = "id"
    choices: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def check_choices(self, row: dict) -> None:
        """Reject values outside a closed vocabulary before they reach the wire."""
        bad = []
        allowed = dict(self.choices)
        if self.status_field:
            allowed[self.status_field] = self.statuses
        for name, values in allowed.items():
            if name in row and row[name] is not None and row[name] not in values:
                bad.append(name)
        if bad:
            raise ValidationError(bad, "Invalid value for: " + ", ".join(bad))


CONSULTATIONS = TableSpec(
    table="consultation_requests",
    label="Consultations",
    required=("name", "email", "phone", "preferred_date", "project_type"),
    status_field="status",
    statuses=CONSULTATION_STATUSES,
    search_fields=("name", "email"),
)

MESSAGES = TableSpec(
    table="contact_messages",
    label="Messages",
    required=("name", "email", "subject", "message"),
    status_field="status",
    statuses=MESSAGE_STATUSES,
    search_fields=("name", "email", "subject"),
)

PORTFOLIO = TableSpec(
    table="portfolio_items",
    label="Portfolio",
    required=("title", "category", "image_url"),
    search_fields=("title", "category"),
    toggle_fields=("featured",),
    bucket="portfolio",
    media_fields=("image_url",),
)

GALLERY = TableSpec(
    table="gallery_items",
    label="Gallery",
    required=("media_url",),
    order_by="display_order",
    descending=False,
    search_fields=("title", "description"),
    bucket="gallery",
    media_fields=("media_url",),
    choices={"media_type": MEDIA_TYPES},
)

SERVICES = TableSpec(
    table="services",
    label="Services",
    required=("title", "description", "image_url"),
    order_by="display_order",
    descending=False,
    search_fields=("title",),
)

TEAM = TableSpec(
    table="team_members",
    label="Team",
    required=("full_name", "role"),
    order_by="display_order",
    descending=False,
    search_fields=("full_name", "role"),
    bucket="team",
    media_fields=("photo_url", "video_url"),
)

TESTIMONIALS = TableSpec(
    table="testimonials",
    label="Testimonials",
    required=("name", "content"),
    search_fields=("name", "content"),
    toggle_fields=("featured",),
)

PROJECTS = TableSpec(
    table="projects",
    label="Projects",
    required=("title", "client_name"),
    status_field="status",
    statuses=PROJECT_STATUSES,
    search_fields=("title", "client_name"),
)

PROPOSALS = TableSpec(
    table="proposals",
    label="Proposals",
    required=("title", "client_name"),
    status_field="status",
    statuses=PROPOSAL_STATUSES,
    search_fields=("title", "client_name"),
)

PROFILES = TableSpec(
    table="profiles",
    label="Users",
    search_fields=("email", "full_name"),
)

USER_ROLES = TableSpec(
    table="user_roles",
    label="Roles",
    required=("user_id",),
    key="user_id",
    choices={"role": ROLES},
)

ALL_TABLES = (
    CONSULTATIONS,
    MESSAGES,
    PORTFOLIO,
    GALLERY,
    SERVICES,
    TEAM,
    TESTIMONIALS,
    PROJECTS,
    PROPOSALS,
    PROFILES,
    USER_ROLES,
)


def parse_features(text: str) -> list:
    """One feature per line; surrounding whitespace and blank lines dropped."""
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def format_features(features) -> str:
    return "\n".join(features or [])


def clamp_rating(value) -> int:
    return max(1, min(5, int(value)))
