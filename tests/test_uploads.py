from studio.screens import ResourceScreen
from studio.uploads import MAX_BATCH, bulk_upload_gallery, file_stem, media_type_for
from fakes import FakeUpload


def gallery_screen(clients):
    screen = ResourceScreen(clients["gallery_items"])
    screen.mount()
    return screen


def test_only_the_first_ten_files_are_uploaded(supabase, clients):
    screen = gallery_screen(clients)
    files = [FakeUpload(f"room-{i}.jpg") for i in range(15)]

    result = bulk_upload_gallery(screen, files, category="kitchen")

    assert MAX_BATCH == 10
    assert len(result.created) == 10
    assert result.ignored == 5
    assert len(supabase.storage.objects) == 10
    assert len(supabase.tables["gallery_items"]) == 10
    assert {r["title"] for r in supabase.tables["gallery_items"]} == {f"room-{i}" for i in range(10)}
    assert len(screen.items) == 10
    assert [n.level for n in screen.drain_notices()] == ["success", "info"]


def test_failed_file_is_skipped_and_the_rest_continue(supabase, clients):
    supabase.storage.reject_extensions.add("mov")
    screen = gallery_screen(clients)
    files = [FakeUpload("a.jpg"), FakeUpload("b.mov", type="video/quicktime"), FakeUpload("c.png", type="image/png")]

    result = bulk_upload_gallery(screen, files)

    assert result.failed == ["b.mov"]
    assert [r["title"] for r in result.created] == ["a", "c"]
    assert len(supabase.tables["gallery_items"]) == 2


def test_insert_failure_leaves_screen_unchanged(supabase, clients):
    screen = gallery_screen(clients)
    supabase.failures.add(("gallery_items", "insert"))

    result = bulk_upload_gallery(screen, [FakeUpload("a.jpg")])

    assert result.created == []
    assert result.failed == ["a.jpg"]
    assert screen.items == {}


def test_shared_fields_apply_to_every_row(supabase, clients):
    screen = gallery_screen(clients)

    bulk_upload_gallery(
        screen,
        [FakeUpload("tour.mp4", type="video/mp4")],
        title="Showroom tour",
        description="Walkthrough",
        category="office",
    )

    (row,) = supabase.tables["gallery_items"]
    assert row["title"] == "Showroom tour"
    assert row["description"] == "Walkthrough"
    assert row["category"] == "office"
    assert row["media_type"] == "video"
    assert row["media_url"].startswith("https://demo.supabase.co/storage/v1/object/public/gallery/")


def test_media_type_and_stem():
    assert media_type_for(FakeUpload("a.mp4", type="video/mp4")) == "video"
    assert media_type_for(FakeUpload("a.bin", type=None)) == "image"
    assert file_stem("living.room.jpg") == "living.room"
    assert file_stem("README") == "README"
