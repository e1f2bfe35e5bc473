from __future__ import annotations

from datetime import date
from functools import partial
from typing import Any, Callable, Dict, Optional

import pandas as pd
import streamlit as st

from db.errors import StudioError
from db.models import (
    GALLERY_CATEGORIES,
    MEDIA_TYPES,
    PORTFOLIO_CATEGORIES,
    PROJECT_TYPES,
    clamp_rating,
    format_features,
    parse_features,
)
from db.resources import ResourceClient
from studio.content import stars
from studio.guards import hold_submit, is_submitting, release_submit
from studio.screens import NEW_ITEM, MessageScreen, Phase, ResourceScreen, UserScreen, load_lookup
from studio.uploads import MAX_BATCH, bulk_upload_gallery

Clients = Dict[str, ResourceClient]

NOTICE_ICONS = {"success": "✅", "error": "⚠️", "info": "ℹ️"}


# ---------------------- SCREEN REGISTRY ----------------------

SCREEN_FACTORIES: Dict[str, Callable[[Clients], ResourceScreen]] = {
    "Consultations": lambda c: ResourceScreen(c["consultation_requests"]),
    "Messages": lambda c: MessageScreen(c["contact_messages"]),
    "Portfolio": lambda c: ResourceScreen(c["portfolio_items"]),
    "Gallery": lambda c: ResourceScreen(c["gallery_items"]),
    "Services": lambda c: ResourceScreen(c["services"]),
    "Team": lambda c: ResourceScreen(c["team_members"]),
    "Testimonials": lambda c: ResourceScreen(c["testimonials"]),
    "Projects": lambda c: ResourceScreen(c["projects"]),
    "Proposals": lambda c: ResourceScreen(c["proposals"]),
    "Users": lambda c: UserScreen(c["profiles"], c["user_roles"]),
}


def use_screen(section: str, clients: Clients) -> ResourceScreen:
    """Mount the screen for `section`, unmounting whichever was shown before."""
    screens = st.session_state.setdefault("screens", {})
    leave_screens(keep=section)
    st.session_state.active_screen = section
    if section not in screens:
        screens[section] = SCREEN_FACTORIES[section](clients)
    screen = screens[section]
    screen.mount()
    return screen


def leave_screens(keep: Optional[str] = None) -> None:
    active = st.session_state.get("active_screen")
    if active and active != keep:
        screen = st.session_state.get("screens", {}).get(active)
        if screen is not None:
            screen.unmount()
        st.session_state.active_screen = None


# ---------------------- SHARED WIDGETS ----------------------

def show_notices(screen: ResourceScreen) -> None:
    for notice in screen.drain_notices():
        text = f"**{notice.title}**" + (f": {notice.message}" if notice.message else "")
        st.toast(text, icon=NOTICE_ICONS.get(notice.level))


def ready(screen: ResourceScreen) -> bool:
    if screen.phase is Phase.ERROR:
        st.error(screen.error)
        if st.button("Retry", key=f"retry-{screen.spec.table}"):
            screen.retry()
            st.rerun()
        return False
    if screen.phase is Phase.LOADING:
        st.info("Loading...")
        return False
    return True


def flush_actions() -> None:
    """Send the requests queued by this run's widget callbacks, then redraw."""
    section = st.session_state.get("active_screen")
    screen = st.session_state.get("screens", {}).get(section) if section else None
    if screen is not None and screen.run_held():
        st.rerun()


def delete_prompt(screen: ResourceScreen, item_id: str) -> None:
    """Delete button plus its confirmation step. Nothing is sent until Confirm."""
    busy = screen.is_pending(item_id)
    if screen.confirming_delete == item_id:
        st.warning("Are you sure you want to delete this item?")
        yes, no = st.columns(2)
        yes.button(
            "Confirm", key=f"confirm-{item_id}", type="primary", disabled=busy,
            on_click=screen.hold, args=(item_id, screen.confirm_delete),
        )
        no.button("Cancel", key=f"cancel-{item_id}", disabled=busy, on_click=screen.cancel_delete)
    else:
        st.button(
            "🗑️ Delete", key=f"delete-{item_id}", disabled=busy,
            on_click=screen.request_delete, args=(item_id,),
        )


def _on_status_change(screen: ResourceScreen, item_id: str, key: str) -> None:
    screen.hold(item_id, partial(screen.set_status, item_id, st.session_state[key]))


def status_selector(screen: ResourceScreen, row: Dict[str, Any], label: str = "Status") -> None:
    statuses = list(screen.spec.statuses)
    current = row.get(screen.spec.status_field)
    # a fresh widget whenever the stored status or the screen data changes
    key = f"status-{row['id']}-{current}-{screen.revision}"
    st.selectbox(
        label,
        statuses,
        index=statuses.index(current) if current in statuses else 0,
        key=key,
        disabled=screen.is_pending(row["id"]),
        on_change=_on_status_change,
        args=(screen, row["id"], key),
    )


def toggle_button(screen: ResourceScreen, row: Dict[str, Any], field: str = "featured") -> None:
    on = bool(row.get(field))
    label = "★ Featured" if on else "☆ Feature"
    st.button(
        label, key=f"{field}-{row['id']}", disabled=screen.is_pending(row["id"]),
        on_click=screen.hold, args=(row["id"], partial(screen.toggle, row["id"], field)),
    )


def csv_export(rows, columns, filename: str) -> None:
    df = pd.DataFrame(rows)
    if df.empty:
        return
    cols = [c for c in columns if c in df.columns]
    st.download_button(
        "📥 Download as CSV",
        df[cols].to_csv(index=False).encode("utf-8"),
        filename,
        "text/csv",
        key=f"download-{filename}",
    )


def _inline_notices(screen: ResourceScreen) -> None:
    for notice in screen.drain_notices():
        text = f"{notice.title}: {notice.message}" if notice.message else notice.title
        if notice.level == "error":
            st.error(text)
        else:
            st.success(text)


def editor_dialog(screen: ResourceScreen, title: str, form: Callable[[ResourceScreen, str], Dict[str, Any]]) -> None:
    """Modal editor over screen.draft. Saving closes it only when the backend accepted the row."""

    @st.dialog(title, width="large")
    def _dialog():
        _inline_notices(screen)
        marker = screen.editing_id or NEW_ITEM
        prefix = f"{screen.spec.table}-{screen.editing_id or 'new'}"
        values = form(screen, prefix)
        saving = screen.is_pending(marker)
        save, cancel = st.columns(2)
        save.button(
            "Save", key=f"{prefix}-save", type="primary", disabled=saving,
            on_click=screen.hold, args=(marker,),
        )
        if cancel.button("Cancel", key=f"{prefix}-cancel", disabled=saving):
            screen.close_editor()
            st.rerun()
        if screen.release(marker):
            if screen.submit(values):
                st.rerun()
            st.rerun(scope="fragment")

    _dialog()


def upload_field(screen: ResourceScreen, prefix: str, field: str, label: str, types, name_prefix: str = "") -> None:
    file = st.file_uploader(label, type=types, key=f"{prefix}-{field}-file")
    if file is not None and st.button(f"Upload {label.lower()}", key=f"{prefix}-{field}-upload"):
        screen.attach_upload(file, field, prefix=name_prefix)
        _inline_notices(screen)
    if screen.draft and screen.draft.get(field):
        st.caption(screen.draft[field])


def _as_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _none_if_blank(value: str) -> Optional[str]:
    return value.strip() or None if isinstance(value, str) else value


# ---------------------- CONSULTATIONS ----------------------

def _save_notes(screen: ResourceScreen, item_id: str, key: str) -> None:
    screen.set_field(item_id, "notes", st.session_state.get(key, ""), success="Notes saved")


def render_consultations(clients: Clients) -> None:
    screen = use_screen("Consultations", clients)
    show_notices(screen)
    st.caption("Manage consultation requests")
    if not ready(screen):
        return

    c1, c2 = st.columns([3, 1])
    query = c1.text_input("Search by name or email", key="consultations-search")
    status = c2.selectbox("Status", ["all"] + list(screen.spec.statuses), key="consultations-status")
    rows = screen.rows(query, status)
    csv_export(rows, ["name", "email", "phone", "preferred_date", "project_type", "status", "notes"], "consultations.csv")

    if not rows:
        st.info("No consultation requests found.")
    for row in rows:
        with st.container(border=True):
            info, actions = st.columns([3, 1])
            with info:
                st.markdown(f"**{row['name']}** · {row['email']} · {row.get('phone') or ''}")
                st.caption(
                    f"{PROJECT_TYPES.get(row.get('project_type'), row.get('project_type'))}"
                    f" · preferred {row.get('preferred_date') or 'n/a'}"
                )
                if row.get("message"):
                    st.write(row["message"])
                with st.expander("Notes"):
                    notes_key = f"notes-{row['id']}"
                    st.text_area("Notes", value=row.get("notes") or "", key=notes_key)
                    st.button(
                        "Save notes", key=f"save-notes-{row['id']}", disabled=screen.is_pending(row["id"]),
                        on_click=screen.hold, args=(row["id"], partial(_save_notes, screen, row["id"], notes_key)),
                    )
            with actions:
                status_selector(screen, row)
                delete_prompt(screen, row["id"])


# ---------------------- MESSAGES ----------------------

def render_messages(clients: Clients) -> None:
    screen = use_screen("Messages", clients)
    show_notices(screen)
    st.caption("Manage contact form submissions")
    if not ready(screen):
        return

    c1, c2 = st.columns([3, 1])
    query = c1.text_input("Search by name, email or subject", key="messages-search")
    status = c2.selectbox("Status", ["all"] + list(screen.spec.statuses), key="messages-status")
    rows = screen.rows(query, status)
    csv_export(rows, ["name", "email", "phone", "subject", "message", "status", "created_at"], "messages.csv")

    listing, detail = st.columns([2, 3])
    with listing:
        if not rows:
            st.info("No messages found.")
        for row in rows:
            marker = "🔵 " if row.get("status") == "unread" else ""
            if st.button(f"{marker}{row['name']} · {row['subject']}", key=f"open-{row['id']}", use_container_width=True):
                screen.open_detail(row["id"])
                st.rerun()

    with detail:
        message = screen.selected
        if message is None:
            st.info("Select a message to read it.")
            return
        with st.container(border=True):
            st.subheader(message["subject"])
            st.markdown(f"From **{message['name']}** <{message['email']}>")
            if message.get("phone"):
                st.caption(message["phone"])
            st.write(message["message"])
            st.link_button("Reply via email", f"mailto:{message['email']}?subject=Re: {message['subject']}")
            status_selector(screen, message)
            delete_prompt(screen, message["id"])
            if st.button("Close", key="close-message"):
                screen.close_detail()
                st.rerun()


# ---------------------- PORTFOLIO ----------------------

def _portfolio_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    title = st.text_input("Title *", value=draft.get("title", ""), key=f"{prefix}-title")
    category = st.selectbox(
        "Category *",
        PORTFOLIO_CATEGORIES,
        index=PORTFOLIO_CATEGORIES.index(draft["category"]) if draft.get("category") in PORTFOLIO_CATEGORIES else 0,
        key=f"{prefix}-category",
    )
    description = st.text_area("Description", value=draft.get("description") or "", key=f"{prefix}-description")
    upload_field(screen, prefix, "image_url", "Image", ["jpg", "jpeg", "png", "webp"])
    image_url = st.text_input("Image URL *", value=draft.get("image_url", ""), key=f"{prefix}-image_url-{draft.get('image_url', '')}")
    featured = st.toggle("Featured", value=bool(draft.get("featured")), key=f"{prefix}-featured")
    return {
        "title": title,
        "category": category,
        "description": _none_if_blank(description),
        "image_url": image_url,
        "featured": featured,
    }


def render_portfolio(clients: Clients) -> None:
    screen = use_screen("Portfolio", clients)
    show_notices(screen)
    st.caption("Manage portfolio projects")
    if not ready(screen):
        return

    if st.button("➕ Add Item", key="portfolio-add"):
        screen.open_editor(defaults={"category": PORTFOLIO_CATEGORIES[0], "featured": False})
        editor_dialog(screen, "Add Portfolio Item", _portfolio_form)

    query = st.text_input("Search", key="portfolio-search")
    rows = screen.rows(query)
    if not rows:
        st.info("No portfolio items yet.")
    columns = st.columns(3)
    for i, row in enumerate(rows):
        with columns[i % 3], st.container(border=True):
            st.image(row["image_url"], use_container_width=True)
            st.caption(row["category"].upper())
            st.markdown(f"**{row['title']}**")
            toggle_button(screen, row)
            if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                screen.open_editor(row["id"])
                editor_dialog(screen, "Edit Portfolio Item", _portfolio_form)
            delete_prompt(screen, row["id"])


# ---------------------- GALLERY ----------------------

def _gallery_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    keys = list(GALLERY_CATEGORIES)
    title = st.text_input("Title", value=draft.get("title") or "", key=f"{prefix}-title")
    description = st.text_area("Description", value=draft.get("description") or "", key=f"{prefix}-description")
    category = st.selectbox(
        "Category",
        keys,
        format_func=GALLERY_CATEGORIES.get,
        index=keys.index(draft["category"]) if draft.get("category") in keys else keys.index("general"),
        key=f"{prefix}-category",
    )
    order = st.number_input("Display order", value=int(draft.get("display_order") or 0), step=1, key=f"{prefix}-order")
    # media itself is never replaced from the editor
    return {
        "title": _none_if_blank(title),
        "description": _none_if_blank(description),
        "category": category,
        "display_order": int(order),
        "media_url": draft.get("media_url"),
    }


def render_gallery(clients: Clients) -> None:
    screen = use_screen("Gallery", clients)
    show_notices(screen)
    st.caption("Upload and manage gallery images and videos")
    if not ready(screen):
        return

    keys = list(GALLERY_CATEGORIES)
    uploading = is_submitting("gallery-upload")
    with st.expander("⬆️ Upload Media", expanded=uploading):
        with st.form("gallery-upload", clear_on_submit=True):
            title = st.text_input("Title (optional, defaults to file name)")
            description = st.text_area("Description")
            category = st.selectbox("Category", keys, format_func=GALLERY_CATEGORIES.get, index=keys.index("general"))
            files = st.file_uploader(
                f"Images or videos (up to {MAX_BATCH} at a time)",
                type=["jpg", "jpeg", "png", "webp", "gif", "mp4", "mov", "webm"],
                accept_multiple_files=True,
            )
            st.form_submit_button(
                "Upload", disabled=uploading, on_click=hold_submit, args=("gallery-upload",)
            )
        if uploading:
            release_submit("gallery-upload")
            if files:
                with st.spinner("Uploading..."):
                    bulk_upload_gallery(screen, files, title=title, description=description, category=category)
            st.rerun()

    c1, c2 = st.columns(2)
    category = c1.selectbox("Category", ["all"] + keys, format_func=lambda k: "All" if k == "all" else GALLERY_CATEGORIES[k], key="gallery-category")
    media_type = c2.selectbox("Type", ["all"] + list(MEDIA_TYPES), key="gallery-type")
    rows = screen.rows(filters={"category": category, "media_type": media_type})
    if not rows:
        st.info("No items in this category yet.")
    columns = st.columns(4)
    for i, row in enumerate(rows):
        with columns[i % 4], st.container(border=True):
            if row.get("media_type") == "video":
                st.video(row["media_url"])
            else:
                st.image(row["media_url"], use_container_width=True)
            st.caption(f"{row.get('title') or 'Untitled'} · {GALLERY_CATEGORIES.get(row.get('category'), row.get('category'))}")
            if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                screen.open_editor(row["id"])
                editor_dialog(screen, "Edit Gallery Item", _gallery_form)
            delete_prompt(screen, row["id"])


# ---------------------- SERVICES ----------------------

def _service_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    title = st.text_input("Title *", value=draft.get("title", ""), key=f"{prefix}-title")
    subtitle = st.text_input("Subtitle", value=draft.get("subtitle") or "", key=f"{prefix}-subtitle")
    description = st.text_area("Description *", value=draft.get("description", ""), key=f"{prefix}-description")
    image_url = st.text_input("Image URL *", value=draft.get("image_url", ""), key=f"{prefix}-image_url")
    features = st.text_area(
        "Features (one per line)", value=format_features(draft.get("features")), key=f"{prefix}-features"
    )
    order = st.number_input("Display order", value=int(draft.get("display_order") or 0), step=1, key=f"{prefix}-order")
    return {
        "title": title,
        "subtitle": _none_if_blank(subtitle),
        "description": description,
        "image_url": image_url,
        "features": parse_features(features),
        "display_order": int(order),
    }


def render_services(clients: Clients) -> None:
    screen = use_screen("Services", clients)
    show_notices(screen)
    st.caption("Manage the services shown on the website")
    if not ready(screen):
        return

    if st.button("➕ Add Service", key="services-add"):
        screen.open_editor(defaults={"features": [], "display_order": len(screen.items)})
        editor_dialog(screen, "Add Service", _service_form)

    if not screen.items:
        st.info("No services yet.")
    for row in screen.rows():
        with st.container(border=True):
            image, body, actions = st.columns([1, 3, 1])
            if row.get("image_url"):
                image.image(row["image_url"], use_container_width=True)
            with body:
                st.markdown(f"**{row['title']}**" + (f", {row['subtitle']}" if row.get("subtitle") else ""))
                st.write(row["description"])
                features = row.get("features") or []
                for feature in features[:3]:
                    st.markdown(f"- {feature}")
                if len(features) > 3:
                    st.caption(f"+{len(features) - 3} more")
            with actions:
                st.caption(f"Order {row.get('display_order')}")
                if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                    screen.open_editor(row["id"])
                    editor_dialog(screen, "Edit Service", _service_form)
                delete_prompt(screen, row["id"])


# ---------------------- TEAM ----------------------

def _team_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    full_name = st.text_input("Full name *", value=draft.get("full_name", ""), key=f"{prefix}-full_name")
    role = st.text_input("Role *", value=draft.get("role", ""), key=f"{prefix}-role")
    bio = st.text_area("Bio", value=draft.get("bio") or "", key=f"{prefix}-bio")
    email = st.text_input("Email", value=draft.get("email") or "", key=f"{prefix}-email")
    phone = st.text_input("Phone", value=draft.get("phone") or "", key=f"{prefix}-phone")
    upload_field(screen, prefix, "photo_url", "Photo", ["jpg", "jpeg", "png", "webp"])
    upload_field(screen, prefix, "video_url", "Video", ["mp4", "mov", "webm"], name_prefix="video-")
    is_leader = st.toggle("Leadership team", value=bool(draft.get("is_leader")), key=f"{prefix}-leader")
    order = st.number_input("Display order", value=int(draft.get("display_order") or 0), step=1, key=f"{prefix}-order")
    return {
        "full_name": full_name,
        "role": role,
        "bio": _none_if_blank(bio),
        "email": _none_if_blank(email),
        "phone": _none_if_blank(phone),
        "photo_url": screen.draft.get("photo_url"),
        "video_url": screen.draft.get("video_url"),
        "is_leader": is_leader,
        "display_order": int(order),
    }


def render_team(clients: Clients) -> None:
    screen = use_screen("Team", clients)
    show_notices(screen)
    st.caption("Manage team members shown on the About page")
    if not ready(screen):
        return

    if st.button("➕ Add Member", key="team-add"):
        screen.open_editor(defaults={"is_leader": False, "display_order": len(screen.items)})
        editor_dialog(screen, "Add Team Member", _team_form)

    if not screen.items:
        st.info("No team members yet.")
    columns = st.columns(3)
    for i, row in enumerate(screen.rows()):
        with columns[i % 3], st.container(border=True):
            if row.get("photo_url"):
                st.image(row["photo_url"], use_container_width=True)
            st.markdown(f"**{row['full_name']}**" + (" ⭐" if row.get("is_leader") else ""))
            st.caption(row["role"])
            if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                screen.open_editor(row["id"])
                editor_dialog(screen, "Edit Team Member", _team_form)
            delete_prompt(screen, row["id"])


# ---------------------- TESTIMONIALS ----------------------

def _testimonial_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    name = st.text_input("Client name *", value=draft.get("name", ""), key=f"{prefix}-name")
    role = st.text_input("Role / location", value=draft.get("role") or "", key=f"{prefix}-role")
    content = st.text_area("Testimonial *", value=draft.get("content", ""), key=f"{prefix}-content")
    rating = st.slider("Rating", 1, 5, value=clamp_rating(draft.get("rating") or 5), key=f"{prefix}-rating")
    featured = st.toggle("Featured", value=bool(draft.get("featured")), key=f"{prefix}-featured")
    return {
        "name": name,
        "role": _none_if_blank(role),
        "content": content,
        "rating": rating,
        "featured": featured,
    }


def render_testimonials(clients: Clients) -> None:
    screen = use_screen("Testimonials", clients)
    show_notices(screen)
    st.caption("Manage client reviews")
    if not ready(screen):
        return

    if st.button("➕ Add Testimonial", key="testimonials-add"):
        screen.open_editor(defaults={"rating": 5, "featured": False})
        editor_dialog(screen, "Add Testimonial", _testimonial_form)

    if not screen.items:
        st.info("No testimonials yet.")
    for row in screen.rows():
        with st.container(border=True):
            body, actions = st.columns([4, 1])
            with body:
                st.markdown(stars(row.get("rating")))
                st.write(f"“{row['content']}”")
                st.caption(f"{row['name']}" + (f", {row['role']}" if row.get("role") else ""))
            with actions:
                toggle_button(screen, row)
                if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                    screen.open_editor(row["id"])
                    editor_dialog(screen, "Edit Testimonial", _testimonial_form)
                delete_prompt(screen, row["id"])


# ---------------------- PROJECTS ----------------------

def _client_fields(draft, prefix: str) -> Dict[str, Any]:
    client_name = st.text_input("Client name *", value=draft.get("client_name", ""), key=f"{prefix}-client_name")
    c1, c2 = st.columns(2)
    client_email = c1.text_input("Client email", value=draft.get("client_email") or "", key=f"{prefix}-client_email")
    client_phone = c2.text_input("Client phone", value=draft.get("client_phone") or "", key=f"{prefix}-client_phone")
    return {
        "client_name": client_name,
        "client_email": _none_if_blank(client_email),
        "client_phone": _none_if_blank(client_phone),
    }


def _project_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    team = st.session_state.get("team_lookup", {})
    statuses = list(screen.spec.statuses)

    title = st.text_input("Title *", value=draft.get("title", ""), key=f"{prefix}-title")
    values = _client_fields(draft, prefix)
    description = st.text_area("Description", value=draft.get("description") or "", key=f"{prefix}-description")
    c1, c2 = st.columns(2)
    status = c1.selectbox(
        "Status", statuses,
        index=statuses.index(draft["status"]) if draft.get("status") in statuses else 0,
        key=f"{prefix}-status",
    )
    budget = c2.number_input("Budget", value=_as_float(draft.get("budget")), min_value=0.0, key=f"{prefix}-budget")
    c3, c4 = st.columns(2)
    start = c3.date_input("Start date", value=_as_date(draft.get("start_date")), key=f"{prefix}-start")
    end = c4.date_input("End date", value=_as_date(draft.get("end_date")), key=f"{prefix}-end")
    options = [""] + list(team)
    assigned = st.selectbox(
        "Assigned team member",
        options,
        format_func=lambda i: team.get(i, "Unassigned") if i else "Unassigned",
        index=options.index(draft["assigned_team_member_id"]) if draft.get("assigned_team_member_id") in options else 0,
        key=f"{prefix}-assigned",
    )
    notes = st.text_area("Notes", value=draft.get("notes") or "", key=f"{prefix}-notes")
    values.update(
        title=title,
        description=_none_if_blank(description),
        status=status,
        budget=float(budget) if budget is not None else None,
        start_date=_iso(start),
        end_date=_iso(end),
        assigned_team_member_id=assigned or None,
        notes=_none_if_blank(notes),
    )
    return values


def render_projects(clients: Clients) -> None:
    screen = use_screen("Projects", clients)
    show_notices(screen)
    st.caption("Track client projects")
    if not ready(screen):
        return

    try:
        st.session_state.team_lookup = load_lookup(clients["team_members"], "full_name")
    except StudioError:
        st.session_state.team_lookup = {}
        st.toast("Team members could not be loaded", icon="⚠️")
    team = st.session_state.team_lookup

    tally = screen.tally()
    for column, status in zip(st.columns(len(tally)), tally):
        column.metric(status.replace("_", " ").title(), tally[status])

    c1, c2 = st.columns([3, 1])
    if c1.button("➕ New Project", key="projects-add"):
        screen.open_editor(defaults={"status": "pending"})
        editor_dialog(screen, "New Project", _project_form)
    status = c2.selectbox("Status", ["all"] + list(screen.spec.statuses), key="projects-status")

    rows = screen.rows(status=status)
    if not rows:
        st.info("No projects found.")
    for row in rows:
        with st.container(border=True):
            body, actions = st.columns([3, 1])
            with body:
                st.markdown(f"**{row['title']}** · {row['client_name']}")
                details = []
                if row.get("budget") is not None:
                    details.append(f"Budget {row['budget']:,.2f}")
                if row.get("start_date") or row.get("end_date"):
                    details.append(f"{row.get('start_date') or '?'} → {row.get('end_date') or '?'}")
                assignee = team.get(row.get("assigned_team_member_id"))
                if assignee:
                    details.append(f"Assigned to {assignee}")
                st.caption(" · ".join(details))
                if row.get("description"):
                    st.write(row["description"])
            with actions:
                status_selector(screen, row)
                if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                    screen.open_editor(row["id"])
                    editor_dialog(screen, "Edit Project", _project_form)
                delete_prompt(screen, row["id"])


# ---------------------- PROPOSALS ----------------------

def _proposal_form(screen: ResourceScreen, prefix: str) -> Dict[str, Any]:
    draft = screen.draft
    statuses = list(screen.spec.statuses)

    title = st.text_input("Title *", value=draft.get("title", ""), key=f"{prefix}-title")
    values = _client_fields(draft, prefix)
    description = st.text_area("Description", value=draft.get("description") or "", key=f"{prefix}-description")
    c1, c2, c3 = st.columns(3)
    status = c1.selectbox(
        "Status", statuses,
        index=statuses.index(draft["status"]) if draft.get("status") in statuses else 0,
        key=f"{prefix}-status",
    )
    budget = c2.number_input(
        "Estimated budget", value=_as_float(draft.get("estimated_budget")), min_value=0.0, key=f"{prefix}-budget"
    )
    valid_until = c3.date_input("Valid until", value=_as_date(draft.get("valid_until")), key=f"{prefix}-valid")
    notes = st.text_area("Notes", value=draft.get("notes") or "", key=f"{prefix}-notes")
    values.update(
        title=title,
        description=_none_if_blank(description),
        status=status,
        estimated_budget=float(budget) if budget is not None else None,
        valid_until=_iso(valid_until),
        notes=_none_if_blank(notes),
    )
    return values


def render_proposals(clients: Clients) -> None:
    screen = use_screen("Proposals", clients)
    show_notices(screen)
    st.caption("Prepare and follow up client proposals")
    if not ready(screen):
        return

    tally = screen.tally()
    for column, status in zip(st.columns(len(tally)), tally):
        column.metric(status.title(), tally[status])

    c1, c2 = st.columns([3, 1])
    if c1.button("➕ New Proposal", key="proposals-add"):
        screen.open_editor(defaults={"status": "draft"})
        editor_dialog(screen, "New Proposal", _proposal_form)
    status = c2.selectbox("Status", ["all"] + list(screen.spec.statuses), key="proposals-status")

    rows = screen.rows(status=status)
    if not rows:
        st.info("No proposals found.")
    for row in rows:
        with st.container(border=True):
            body, actions = st.columns([3, 1])
            with body:
                st.markdown(f"**{row['title']}** · {row['client_name']}")
                details = []
                if row.get("estimated_budget") is not None:
                    details.append(f"Estimate {row['estimated_budget']:,.2f}")
                if row.get("valid_until"):
                    details.append(f"Valid until {row['valid_until']}")
                st.caption(" · ".join(details))
                if row.get("description"):
                    st.write(row["description"])
            with actions:
                status_selector(screen, row)
                if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                    screen.open_editor(row["id"])
                    editor_dialog(screen, "Edit Proposal", _proposal_form)
                delete_prompt(screen, row["id"])


# ---------------------- USERS ----------------------

def render_users(clients: Clients, current_user_id: Optional[str] = None) -> None:
    screen: UserScreen = use_screen("Users", clients)
    show_notices(screen)
    st.caption("Manage user accounts and permissions")
    if not ready(screen):
        return

    query = st.text_input("Search users...", key="users-search")
    rows = screen.rows(query)
    if not rows:
        st.info("No users found.")
    for row in rows:
        with st.container(border=True):
            body, role, action = st.columns([3, 1, 1])
            body.markdown(f"**{row.get('full_name') or 'No name'}**  \n{row.get('email') or ''}")
            role.markdown(":orange-background[Admin]" if row["role"] == "admin" else ":gray-background[User]")
            label = "Remove Admin" if row["role"] == "admin" else "Make Admin"
            disabled = screen.is_pending(row["id"]) or row["id"] == current_user_id
            action.button(
                label, key=f"role-{row['id']}", disabled=disabled,
                on_click=screen.hold, args=(row["id"], partial(screen.toggle_role, row["id"])),
            )


ADMIN_RENDERERS = {
    "Consultations": render_consultations,
    "Messages": render_messages,
    "Portfolio": render_portfolio,
    "Gallery": render_gallery,
    "Services": render_services,
    "Team": render_team,
    "Testimonials": render_testimonials,
    "Projects": render_projects,
    "Proposals": render_proposals,
}
