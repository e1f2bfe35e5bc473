import pytest

from db.errors import BackendError, NotFound, UploadError, ValidationError
from db.models import format_features, parse_features
from db.resources import BlobStore
from fakes import FakeStorage, FakeUpload


def test_list_defaults_to_newest_first(supabase, clients):
    supabase.seed("consultation_requests", {"name": "Old"}, {"name": "New"})

    rows = clients["consultation_requests"].list()

    assert [r["name"] for r in rows] == ["New", "Old"]


def test_curated_tables_list_by_display_order(supabase, clients):
    supabase.seed("gallery_items", {"title": "b", "display_order": 2}, {"title": "a", "display_order": 1})

    rows = clients["gallery_items"].list()

    assert [r["title"] for r in rows] == ["a", "b"]


def test_list_applies_equality_filters_and_limit(supabase, clients):
    supabase.seed(
        "projects",
        {"title": "A", "status": "pending"},
        {"title": "B", "status": "completed"},
        {"title": "C", "status": "pending"},
    )

    rows = clients["projects"].list(filters={"status": "pending"}, limit=1)

    assert len(rows) == 1
    assert rows[0]["status"] == "pending"


def test_get_missing_row_raises_not_found(clients):
    with pytest.raises(NotFound):
        clients["services"].get("nope")


def test_insert_with_blank_required_field_never_hits_backend(supabase, clients):
    with pytest.raises(ValidationError) as exc:
        clients["testimonials"].insert({"name": "Ann", "content": "   "})

    assert exc.value.missing == ["content"]
    assert supabase.calls == []


def test_insert_rejects_unknown_status(supabase, clients):
    with pytest.raises(ValidationError):
        clients["proposals"].insert({"title": "Loft", "client_name": "Ann", "status": "lost"})
    assert supabase.calls == []


def test_insert_returns_server_row(clients):
    row = clients["testimonials"].insert({"name": "Ann", "content": "Lovely", "rating": 5})

    assert row["id"]
    assert row["created_at"]
    assert row["name"] == "Ann"


def test_update_sends_only_the_patch(supabase, clients):
    (row,) = supabase.seed("portfolio_items", {"title": "Loft", "category": "Kitchen", "featured": False})

    stored = clients["portfolio_items"].update(row["id"], {"featured": True})

    assert supabase.calls[-1]["payload"] == {"featured": True}
    assert stored["title"] == "Loft"
    assert stored["featured"] is True


def test_update_cannot_blank_a_required_field(supabase, clients):
    (row,) = supabase.seed("services", {"title": "Ceilings", "description": "x", "image_url": "u"})

    with pytest.raises(ValidationError):
        clients["services"].update(row["id"], {"title": ""})
    assert supabase.calls == []


def test_update_of_missing_row_raises_not_found(clients):
    with pytest.raises(NotFound):
        clients["projects"].update("gone", {"status": "completed"})


def test_second_delete_reports_not_found_and_leaves_table_unchanged(supabase, clients):
    first, second = supabase.seed("testimonials", {"name": "A", "content": "x"}, {"name": "B", "content": "y"})
    testimonials = clients["testimonials"]

    testimonials.delete(first["id"])
    with pytest.raises(NotFound):
        testimonials.delete(first["id"])

    assert [r["id"] for r in supabase.tables["testimonials"]] == [second["id"]]


def test_delete_removes_media_before_row(supabase, clients):
    url = f"{FakeStorage.BASE}/gallery/1700000000000-0.jpg"
    (row,) = supabase.seed("gallery_items", {"media_url": url, "media_type": "image"})

    clients["gallery_items"].delete(row["id"], row=row)

    assert supabase.storage.removed == [("gallery", "1700000000000-0.jpg")]
    assert supabase.tables["gallery_items"] == []


def test_delete_goes_ahead_when_media_cleanup_fails(supabase, clients):
    supabase.storage.fail_remove = True
    (row,) = supabase.seed("team_members", {
        "full_name": "Ann", "role": "Designer",
        "photo_url": f"{FakeStorage.BASE}/team/ann.jpg", "video_url": None,
    })

    clients["team_members"].delete(row["id"])

    assert supabase.tables["team_members"] == []


def test_delete_skips_foreign_media_urls(supabase, clients):
    (row,) = supabase.seed("portfolio_items", {"title": "T", "category": "Kitchen", "image_url": "https://cdn.example.com/a.jpg"})

    clients["portfolio_items"].delete(row["id"], row=row)

    assert supabase.storage.removed == []


def test_count_uses_exact_count(supabase, clients):
    supabase.seed("contact_messages", {"status": "unread"}, {"status": "read"}, {"status": "unread"})

    assert clients["contact_messages"].count() == 3
    assert clients["contact_messages"].count({"status": "unread"}) == 2


def test_backend_failure_becomes_backend_error(supabase, clients):
    supabase.failures.add(("projects", "select"))

    with pytest.raises(BackendError) as exc:
        clients["projects"].list()
    assert exc.value.code == "503"


def test_upload_blob_returns_public_url(supabase, clients):
    url = clients["portfolio_items"].upload_blob(FakeUpload("kitchen.jpg"), prefix="portfolio-")

    assert url.startswith(f"{FakeStorage.BASE}/portfolio/portfolio-")
    assert url.endswith(".jpg")
    assert len(supabase.storage.objects) == 1


def test_upload_blob_failure_raises_upload_error(supabase, clients):
    supabase.storage.reject_extensions.add("mov")

    with pytest.raises(UploadError) as exc:
        clients["gallery_items"].upload_blob(FakeUpload("clip.mov", type="video/quicktime"))
    assert exc.value.message.endswith("Payload too large")
    assert supabase.storage.objects == {}


def test_upload_blob_on_table_without_bucket(clients):
    with pytest.raises(UploadError):
        clients["testimonials"].upload_blob(FakeUpload("a.jpg"))


@pytest.mark.parametrize("url,key", [
    (f"{FakeStorage.BASE}/gallery/a/b.png", "a/b.png"),
    (f"{FakeStorage.BASE}/gallery/b.png?t=1", "b.png"),
    ("https://cdn.example.com/b.png", None),
    (None, None),
])
def test_key_from_url(url, key):
    assert BlobStore.key_from_url("gallery", url) == key


def test_features_one_per_line():
    assert parse_features("  Design\n\nInstall \n") == ["Design", "Install"]
    assert format_features(["Design", "Install"]) == "Design\nInstall"
