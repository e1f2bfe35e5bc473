from __future__ import annotations

from datetime import date
from typing import Dict

import streamlit as st

from db.models import GALLERY_CATEGORIES, PORTFOLIO_CATEGORIES, PROJECT_TYPES
from db.resources import ResourceClient
from studio.config import SiteConfig
from studio.content import fetch_public, featured, filter_by_category, partition_team, split_media, stars
from studio.guards import hold_submit, is_submitting, release_submit
from studio.intake import ConsultationForm, ContactForm, submit_intake

Clients = Dict[str, ResourceClient]


def _form_version(name: str) -> int:
    return st.session_state.get(f"{name}-version", 0)


def _show_feedback(name: str) -> None:
    ack = st.session_state.pop(f"{name}-ack", None)
    if ack:
        title, body = ack
        st.success(f"**{title}** {body}")
    error = st.session_state.pop(f"{name}-error", None)
    if error:
        st.error(error)


def _finish_intake(name: str, result, form) -> None:
    """On success the form widgets are recreated empty; on failure input is kept."""
    if result.success:
        st.session_state[f"{name}-ack"] = form.acknowledgement
        st.session_state[f"{name}-version"] = _form_version(name) + 1
    else:
        st.session_state[f"{name}-error"] = result.error
    st.rerun()


# ---------------------- HOME ----------------------

def render_home(clients: Clients, site: SiteConfig, navigate) -> None:
    st.title(site.name)
    st.subheader(site.tagline)
    if st.button("Book a Consultation", type="primary"):
        navigate("Consultancy")

    services = fetch_public(clients["services"])
    if services:
        st.header("What We Do")
        columns = st.columns(min(len(services), 4))
        for i, service in enumerate(services[:4]):
            with columns[i]:
                if service.get("image_url"):
                    st.image(service["image_url"], use_container_width=True)
                st.markdown(f"**{service['title']}**")
                st.caption(service.get("subtitle") or "")

    work = featured(fetch_public(clients["portfolio_items"]))
    if work:
        st.header("Featured Work")
        columns = st.columns(3)
        for i, item in enumerate(work[:6]):
            with columns[i % 3]:
                st.image(item["image_url"], caption=item["title"], use_container_width=True)

    reviews = featured(fetch_public(clients["testimonials"]))
    if reviews:
        st.header("What Our Clients Say")
        for review in reviews:
            with st.container(border=True):
                st.markdown(stars(review.get("rating")))
                st.write(f"“{review['content']}”")
                st.caption(review["name"] + (f", {review['role']}" if review.get("role") else ""))


# ---------------------- ABOUT ----------------------

def _member_card(member) -> None:
    with st.container(border=True):
        if member.get("photo_url"):
            st.image(member["photo_url"], use_container_width=True)
        st.markdown(f"**{member['full_name']}**")
        st.caption(member["role"])
        if member.get("bio"):
            st.write(member["bio"])
        if member.get("video_url"):
            st.video(member["video_url"])


def render_about(clients: Clients, site: SiteConfig) -> None:
    st.title(f"About {site.name}")
    leaders, staff = partition_team(fetch_public(clients["team_members"]))

    if leaders:
        st.header("Leadership")
        columns = st.columns(min(len(leaders), 3))
        for i, member in enumerate(leaders):
            with columns[i % len(columns)]:
                _member_card(member)
    if staff:
        st.header("Our Team")
        columns = st.columns(4)
        for i, member in enumerate(staff):
            with columns[i % 4]:
                _member_card(member)
    if not leaders and not staff:
        st.info("Team profiles are coming soon.")


# ---------------------- SERVICES ----------------------

def render_services(clients: Clients) -> None:
    st.title("Our Services")
    services = fetch_public(clients["services"])
    if not services:
        st.info("Services will be listed here soon.")
    for service in services:
        with st.container(border=True):
            image, body = st.columns([2, 3])
            if service.get("image_url"):
                image.image(service["image_url"], use_container_width=True)
            with body:
                st.subheader(service["title"])
                if service.get("subtitle"):
                    st.caption(service["subtitle"])
                st.write(service["description"])
                for feature in service.get("features") or []:
                    st.markdown(f"- {feature}")


# ---------------------- PORTFOLIO ----------------------

def render_portfolio(clients: Clients) -> None:
    st.title("Portfolio")
    category = st.radio("Category", ["All"] + PORTFOLIO_CATEGORIES, horizontal=True, key="public-portfolio-category")
    items = filter_by_category(fetch_public(clients["portfolio_items"]), category)
    if not items:
        st.info("No projects in this category yet.")
    columns = st.columns(3)
    for i, item in enumerate(items):
        with columns[i % 3]:
            st.image(item["image_url"], use_container_width=True)
            st.caption(item["category"].upper())
            st.markdown(f"**{item['title']}**")
            if item.get("description"):
                with st.expander("Details"):
                    st.write(item["description"])


# ---------------------- GALLERY ----------------------

def render_gallery(clients: Clients) -> None:
    st.title("Gallery")
    keys = ["all"] + list(GALLERY_CATEGORIES)
    category = st.radio(
        "Category",
        keys,
        format_func=lambda k: "All" if k == "all" else GALLERY_CATEGORIES[k],
        horizontal=True,
        key="public-gallery-category",
    )
    images, videos = split_media(filter_by_category(fetch_public(clients["gallery_items"]), category))
    if not images and not videos:
        st.info("No items in this category yet.")
    if images:
        columns = st.columns(4)
        for i, item in enumerate(images):
            with columns[i % 4]:
                st.image(item["media_url"], caption=item.get("title"), use_container_width=True)
    if videos:
        st.header("Videos")
        columns = st.columns(2)
        for i, item in enumerate(videos):
            with columns[i % 2]:
                st.video(item["media_url"])
                if item.get("title"):
                    st.caption(item["title"])


# ---------------------- INTAKE FORMS ----------------------

def render_consultancy(clients: Clients) -> None:
    st.title("Book a Consultation")
    st.caption("Tell us about your space and we'll arrange a visit.")
    types = [""] + list(PROJECT_TYPES)

    _show_feedback("consultation")
    sending = is_submitting("consultation")
    key = f"consultation-{_form_version('consultation')}"
    with st.form(f"{key}-form"):
        c1, c2 = st.columns(2)
        name = c1.text_input("Full name *", key=f"{key}-name")
        email = c2.text_input("Email *", key=f"{key}-email")
        c3, c4 = st.columns(2)
        phone = c3.text_input("Phone *", key=f"{key}-phone")
        preferred = c4.date_input("Preferred date *", value=None, min_value=date.today(), key=f"{key}-date")
        project_type = st.selectbox(
            "Project type *", types, format_func=lambda k: PROJECT_TYPES.get(k, "Select a service"),
            key=f"{key}-type",
        )
        message = st.text_area("Tell us about your project", key=f"{key}-message")
        st.form_submit_button(
            "Request Consultation", type="primary", disabled=sending,
            on_click=hold_submit, args=("consultation",),
        )

    if sending:
        release_submit("consultation")
        form = ConsultationForm(
            name=name, email=email, phone=phone,
            preferred_date=preferred, project_type=project_type, message=message,
        )
        _finish_intake("consultation", submit_intake(form, clients["consultation_requests"]), form)


def render_contact(clients: Clients) -> None:
    st.title("Contact Us")

    _show_feedback("contact")
    sending = is_submitting("contact")
    key = f"contact-{_form_version('contact')}"
    with st.form(f"{key}-form"):
        c1, c2 = st.columns(2)
        name = c1.text_input("Name *", key=f"{key}-name")
        email = c2.text_input("Email *", key=f"{key}-email")
        c3, c4 = st.columns(2)
        phone = c3.text_input("Phone", key=f"{key}-phone")
        subject = c4.text_input("Subject *", key=f"{key}-subject")
        message = st.text_area("Message *", key=f"{key}-message")
        st.form_submit_button(
            "Send Message", type="primary", disabled=sending,
            on_click=hold_submit, args=("contact",),
        )

    if sending:
        release_submit("contact")
        form = ContactForm(name=name, email=email, phone=phone, subject=subject, message=message)
        _finish_intake("contact", submit_intake(form, clients["contact_messages"]), form)
