import pytest

from db.models import CONSULTATION_STATUSES, MESSAGE_STATUSES, PROJECT_STATUSES, PROPOSAL_STATUSES
from studio.screens import MessageScreen, Phase, ResourceScreen, UserScreen, load_lookup
from fakes import FakeStorage


def mounted(resource, cls=ResourceScreen):
    screen = cls(resource)
    screen.mount()
    return screen


def test_mount_fetches_once(supabase, clients):
    supabase.seed("services", {"title": "Ceilings", "display_order": 1})
    screen = mounted(clients["services"])
    screen.mount()

    assert screen.phase is Phase.READY
    assert len(supabase.calls_to("services", "select")) == 1


def test_failed_load_shows_error_and_retry_recovers(supabase, clients):
    supabase.seed("projects", {"title": "Loft", "client_name": "Ann", "status": "pending"})
    supabase.failures.add(("projects", "select"))
    screen = mounted(clients["projects"])

    assert screen.phase is Phase.ERROR
    assert screen.error == "Failed to load projects"
    assert screen.items == {}

    supabase.failures.clear()
    screen.retry()

    assert screen.phase is Phase.READY
    assert len(screen.items) == 1


def test_rows_fetched_after_unmount_are_discarded(supabase, clients):
    supabase.seed("testimonials", {"name": "Ann", "content": "x"})
    screen = ResourceScreen(clients["testimonials"])
    original_list = screen.resource.list

    def slow_list(*args, **kwargs):
        rows = original_list(*args, **kwargs)
        screen.unmount()
        return rows

    screen.resource.list = slow_list
    screen.mount()

    assert screen.items == {}
    assert screen.phase is Phase.LOADING


def test_search_filters_locally_without_a_request(supabase, clients):
    supabase.seed(
        "contact_messages",
        {"name": "Sarah Lee", "email": "s@x.com", "subject": "Kitchen", "status": "unread"},
        {"name": "Tom", "email": "tom@x.com", "subject": "From sarah's friend", "status": "read"},
        {"name": "Bob", "email": "bob@x.com", "subject": "Floors", "status": "read"},
    )
    screen = mounted(clients["contact_messages"], MessageScreen)
    calls = len(supabase.calls)

    names = {r["name"] for r in screen.rows("SARAH")}

    assert names == {"Sarah Lee", "Tom"}
    assert len(supabase.calls) == calls


def test_rows_combine_search_and_status(supabase, clients):
    supabase.seed(
        "consultation_requests",
        {"name": "Sarah", "email": "a@x.com", "status": "pending"},
        {"name": "Sarah K", "email": "b@x.com", "status": "completed"},
    )
    screen = mounted(clients["consultation_requests"])

    assert [r["name"] for r in screen.rows("sarah", status="completed")] == ["Sarah K"]
    assert len(screen.rows("sarah", status="all")) == 2


def test_tally_counts_every_status(supabase, clients):
    supabase.seed("proposals", {"title": "a", "client_name": "c", "status": "sent"}, {"title": "b", "client_name": "c", "status": "sent"})
    screen = mounted(clients["proposals"])

    assert screen.tally() == {"draft": 0, "sent": 2, "accepted": 0, "rejected": 0}


@pytest.mark.parametrize("table,statuses", [
    ("consultation_requests", CONSULTATION_STATUSES),
    ("contact_messages", MESSAGE_STATUSES),
    ("projects", PROJECT_STATUSES),
    ("proposals", PROPOSAL_STATUSES),
])
def test_status_changes_round_trip(supabase, clients, table, statuses):
    (row,) = supabase.seed(table, {"title": "t", "name": "n", "client_name": "c", "status": statuses[0]})
    screen = mounted(clients[table])

    for status in statuses:
        assert screen.set_status(row["id"], status)
        assert screen.items[row["id"]]["status"] == status
        assert clients[table].get(row["id"])["status"] == status


def test_unknown_status_is_rejected_before_any_request(supabase, clients):
    (row,) = supabase.seed("projects", {"title": "t", "client_name": "c", "status": "pending"})
    screen = mounted(clients["projects"])
    calls = len(supabase.calls)

    assert not screen.set_status(row["id"], "archived")
    assert len(supabase.calls) == calls
    assert screen.drain_notices()[0].title == "Invalid status"


def test_failed_update_leaves_local_state_untouched(supabase, clients):
    (row,) = supabase.seed("consultation_requests", {"name": "Ann", "status": "pending"})
    screen = mounted(clients["consultation_requests"])
    supabase.failures.add(("consultation_requests", "update"))

    assert not screen.set_status(row["id"], "contacted")

    assert screen.items[row["id"]]["status"] == "pending"
    assert not screen.is_pending(row["id"])
    assert [n.title for n in screen.drain_notices()] == ["Save failed"]


def test_update_of_vanished_row_reports_not_found(supabase, clients):
    (row,) = supabase.seed("projects", {"title": "t", "client_name": "c", "status": "pending"})
    screen = mounted(clients["projects"])
    supabase.tables["projects"].clear()

    assert not screen.set_status(row["id"], "completed")
    assert screen.drain_notices()[0].title == "Not found"


def test_pending_row_ignores_further_updates(supabase, clients):
    (row,) = supabase.seed("projects", {"title": "t", "client_name": "c", "status": "pending"})
    screen = mounted(clients["projects"])
    screen.pending.add(row["id"])
    calls = len(supabase.calls)

    assert not screen.set_status(row["id"], "completed")
    assert len(supabase.calls) == calls


@pytest.mark.parametrize("table", ["portfolio_items", "testimonials"])
def test_featured_toggle_sends_only_featured(supabase, clients, table):
    (row,) = supabase.seed(table, {"title": "Loft", "name": "Ann", "content": "x", "category": "Kitchen", "featured": False})
    screen = mounted(clients[table])

    assert screen.toggle(row["id"], "featured")

    update = supabase.calls_to(table, "update")[-1]
    assert update["payload"] == {"featured": True}
    stored = supabase.tables[table][0]
    assert {k: v for k, v in stored.items() if k != "featured"} == {k: v for k, v in row.items() if k != "featured"}
    assert screen.items[row["id"]]["featured"] is True


def test_toggle_rejects_non_toggle_fields(clients):
    screen = ResourceScreen(clients["portfolio_items"])
    with pytest.raises(ValueError):
        screen.toggle("x", "title")


def test_opening_unread_message_marks_it_read_once(supabase, clients):
    (row,) = supabase.seed("contact_messages", {"name": "Ann", "status": "unread"})
    screen = mounted(clients["contact_messages"], MessageScreen)

    screen.open_detail(row["id"])
    screen.close_detail()
    screen.open_detail(row["id"])

    updates = supabase.calls_to("contact_messages", "update")
    assert len(updates) == 1
    assert updates[0]["payload"] == {"status": "read"}
    assert screen.selected["status"] == "read"


@pytest.mark.parametrize("status", ["read", "replied"])
def test_opening_handled_message_sends_nothing(supabase, clients, status):
    (row,) = supabase.seed("contact_messages", {"name": "Ann", "status": status})
    screen = mounted(clients["contact_messages"], MessageScreen)

    screen.open_detail(row["id"])

    assert supabase.calls_to("contact_messages", "update") == []
    assert screen.selected["status"] == status


def test_create_puts_new_row_first(supabase, clients):
    supabase.seed("testimonials", {"name": "Old", "content": "x"})
    screen = mounted(clients["testimonials"])
    screen.open_editor(defaults={"rating": 5})

    assert screen.submit({"name": "New", "content": "Great", "rating": 5})

    assert [r["name"] for r in screen.rows()] == ["New", "Old"]
    assert screen.draft is None


def test_create_in_curated_table_keeps_display_order(supabase, clients):
    supabase.seed("services", {"title": "A", "display_order": 1}, {"title": "C", "display_order": 3})
    screen = mounted(clients["services"])
    screen.open_editor()

    assert screen.submit({"title": "B", "description": "d", "image_url": "u", "display_order": 2})

    assert [r["title"] for r in screen.rows()] == ["A", "B", "C"]


def test_missing_required_field_keeps_editor_open(supabase, clients):
    screen = mounted(clients["team_members"])
    draft = screen.open_editor(defaults={"display_order": 0})
    calls = len(supabase.calls)

    assert not screen.submit({"full_name": "Ann", "role": ""})

    assert screen.draft is draft
    assert len(supabase.calls) == calls
    assert screen.drain_notices()[0].message == "role"


def test_edit_sends_changed_fields_only(supabase, clients):
    (row,) = supabase.seed("projects", {"title": "Loft", "client_name": "Ann", "status": "pending", "budget": 100})
    screen = mounted(clients["projects"])
    values = dict(screen.open_editor(row["id"]))
    values["budget"] = 250

    assert screen.submit(values)

    assert supabase.calls_to("projects", "update")[-1]["payload"] == {"budget": 250}
    assert screen.items[row["id"]]["budget"] == 250


def test_failed_save_keeps_editor_and_items(supabase, clients):
    (row,) = supabase.seed("projects", {"title": "Loft", "client_name": "Ann", "status": "pending"})
    screen = mounted(clients["projects"])
    values = dict(screen.open_editor(row["id"]))
    values["title"] = "Attic"
    supabase.failures.add(("projects", "update"))

    assert not screen.submit(values)

    assert screen.editing_id == row["id"]
    assert screen.items[row["id"]]["title"] == "Loft"


def test_cancel_discards_the_draft(supabase, clients):
    (row,) = supabase.seed("testimonials", {"name": "Ann", "content": "x"})
    screen = mounted(clients["testimonials"])
    screen.open_editor(row["id"])["content"] = "changed"

    screen.close_editor()

    assert screen.draft is None
    assert screen.items[row["id"]]["content"] == "x"
    assert supabase.calls_to("testimonials", "update") == []


def test_delete_waits_for_confirmation(supabase, clients):
    (row,) = supabase.seed("proposals", {"title": "t", "client_name": "c", "status": "draft"})
    screen = mounted(clients["proposals"])

    screen.request_delete(row["id"])
    screen.cancel_delete()

    assert not screen.confirm_delete()
    assert supabase.calls_to("proposals", "delete") == []
    assert row["id"] in screen.items


@pytest.mark.parametrize("table", [
    "consultation_requests", "contact_messages", "portfolio_items", "gallery_items", "services",
    "team_members", "testimonials", "projects", "proposals",
])
def test_deleting_an_already_deleted_row_is_harmless(supabase, clients, table):
    first, second = supabase.seed(table, {"title": "a"}, {"title": "b"})
    screen = mounted(clients[table])
    clients[table].delete(first["id"], row=first)

    screen.request_delete(first["id"])
    assert screen.confirm_delete()

    assert list(screen.items) == [second["id"]]
    assert [r["id"] for r in supabase.tables[table]] == [second["id"]]


def test_failed_delete_keeps_row(supabase, clients):
    (row,) = supabase.seed("projects", {"title": "t", "client_name": "c", "status": "pending"})
    screen = mounted(clients["projects"])
    supabase.failures.add(("projects", "delete"))

    screen.request_delete(row["id"])
    assert not screen.confirm_delete()

    assert row["id"] in screen.items
    assert screen.drain_notices()[0].title == "Delete failed"


def test_delete_closes_open_detail(supabase, clients):
    (row,) = supabase.seed("consultation_requests", {"name": "Ann", "status": "pending"})
    screen = mounted(clients["consultation_requests"])
    screen.open_detail(row["id"])

    screen.request_delete(row["id"])
    screen.confirm_delete()

    assert screen.selected is None


def test_users_default_to_user_role(supabase, clients):
    ann, bob = supabase.seed("profiles", {"email": "ann@x.com"}, {"email": "bob@x.com"})
    supabase.seed("user_roles", {"user_id": ann["id"], "role": "admin"})
    screen = UserScreen(clients["profiles"], clients["user_roles"])
    screen.mount()

    assert screen.items[ann["id"]]["role"] == "admin"
    assert screen.items[bob["id"]]["role"] == "user"


def test_role_toggle_updates_role_row(supabase, clients):
    (ann,) = supabase.seed("profiles", {"email": "ann@x.com"})
    supabase.seed("user_roles", {"user_id": ann["id"], "role": "user"})
    screen = UserScreen(clients["profiles"], clients["user_roles"])
    screen.mount()

    assert screen.toggle_role(ann["id"])

    assert supabase.calls_to("user_roles", "update")[-1]["filters"] == [("user_id", ann["id"])]
    assert supabase.tables["user_roles"][0]["role"] == "admin"
    assert screen.items[ann["id"]]["role"] == "admin"


def test_failed_role_toggle_keeps_role(supabase, clients):
    (ann,) = supabase.seed("profiles", {"email": "ann@x.com"})
    supabase.seed("user_roles", {"user_id": ann["id"], "role": "admin"})
    screen = UserScreen(clients["profiles"], clients["user_roles"])
    screen.mount()
    supabase.failures.add(("user_roles", "update"))

    assert not screen.toggle_role(ann["id"])
    assert screen.items[ann["id"]]["role"] == "admin"
    assert screen.drain_notices()[0].title == "Failed to update user role"


def test_users_are_never_deleted(supabase, clients):
    (ann,) = supabase.seed("profiles", {"email": "ann@x.com"})
    screen = UserScreen(clients["profiles"], clients["user_roles"])
    screen.mount()

    screen.request_delete(ann["id"])
    assert not screen.confirm_delete()
    assert supabase.calls_to("profiles", "delete") == []


def test_lookup_maps_ids_to_labels(supabase, clients):
    ann, bob = supabase.seed("team_members", {"full_name": "Ann"}, {"full_name": None})

    assert load_lookup(clients["team_members"], "full_name") == {ann["id"]: "Ann", bob["id"]: ""}


def test_held_action_keeps_row_pending_until_sent(supabase, clients):
    (row,) = supabase.seed("portfolio_items", {"title": "Loft", "category": "Kitchen", "featured": False})
    screen = mounted(clients["portfolio_items"])
    revision = screen.revision

    assert screen.hold(row["id"], lambda: screen.toggle(row["id"], "featured"))
    assert screen.is_pending(row["id"])
    assert not screen.hold(row["id"], lambda: screen.toggle(row["id"], "featured"))
    assert supabase.calls_to("portfolio_items", "update") == []

    assert screen.run_held()

    assert len(supabase.calls_to("portfolio_items", "update")) == 1
    assert screen.items[row["id"]]["featured"] is True
    assert not screen.is_pending(row["id"])
    assert screen.revision == revision + 1
    assert not screen.run_held()


def test_released_marker_sends_nothing(clients):
    screen = mounted(clients["testimonials"])

    screen.hold("__new__")
    assert screen.is_pending("__new__")
    assert screen.release("__new__")
    assert not screen.release("__new__")
    assert not screen.is_pending("__new__")


def test_replaced_photo_is_removed_from_storage(supabase, clients):
    old = f"{FakeStorage.BASE}/team/old.jpg"
    (row,) = supabase.seed("team_members", {"full_name": "Ann", "role": "Designer", "photo_url": old, "video_url": None})
    screen = mounted(clients["team_members"])
    values = dict(screen.open_editor(row["id"]))
    values["photo_url"] = f"{FakeStorage.BASE}/team/new.jpg"

    assert screen.submit(values)

    assert supabase.storage.removed == [("team", "old.jpg")]


def test_unchanged_media_is_kept(supabase, clients):
    (row,) = supabase.seed("team_members", {"full_name": "Ann", "role": "Designer", "photo_url": f"{FakeStorage.BASE}/team/a.jpg"})
    screen = mounted(clients["team_members"])
    values = dict(screen.open_editor(row["id"]))
    values["role"] = "Lead Designer"

    assert screen.submit(values)

    assert supabase.storage.removed == []
