from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional, Set

from db.errors import NotFound, StudioError, UploadError, ValidationError
from db.models import DEFAULT_ROLE
from db.resources import ResourceClient, missing_fields

logger = logging.getLogger(__name__)

NEW_ITEM = "__new__"
READ_ONLY_FIELDS = ("id", "created_at", "updated_at")


class Phase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class Notice:
    level: Literal["success", "error", "info"]
    title: str
    message: str = ""


class ResourceScreen:
    """
    State behind one admin list/detail screen.

    `items` is keyed by row id and only ever holds rows the backend returned:
    nothing is added, changed or dropped before the matching call succeeded.
    Rendering code reads `rows()` and calls the mutation methods; every
    outcome is queued as a Notice for the page to show.
    """

    def __init__(self, resource: ResourceClient):
        self.resource = resource
        self.spec = resource.spec
        self.items: Dict[str, Dict[str, Any]] = {}
        self.phase = Phase.LOADING
        self.error: Optional[str] = None
        self.pending: Set[str] = set()
        self.held: Dict[str, Optional[Callable[[], Any]]] = {}
        self.revision = 0
        self.notices: List[Notice] = []
        self.selected_id: Optional[str] = None
        self.draft: Optional[Dict[str, Any]] = None
        self.editing_id: Optional[str] = None
        self.confirming_delete: Optional[str] = None
        self.mounted = False
        self._generation = 0

    # ---------------- lifecycle ----------------

    def mount(self) -> None:
        if self.mounted:
            return
        self.mounted = True
        self.load()

    def unmount(self) -> None:
        self.mounted = False
        self._generation += 1
        self.close_editor()
        self.confirming_delete = None

    def load(self) -> None:
        generation = self._generation
        self.phase = Phase.LOADING
        try:
            rows = self.fetch()
        except StudioError as e:
            if generation != self._generation:
                return
            logger.error("Loading %s failed: %s", self.spec.table, e.message)
            self.phase = Phase.ERROR
            self.error = f"Failed to load {self.spec.label.lower()}"
            return

        if generation != self._generation:
            logger.debug("Discarding %s rows fetched for an unmounted screen", self.spec.table)
            return
        self.items = {row[self.spec.key]: row for row in rows}
        self.revision += 1
        self.phase = Phase.READY
        self.error = None

    retry = load

    def fetch(self) -> List[Dict[str, Any]]:
        return self.resource.list()

    # ---------------- reading ----------------

    def rows(self, query: str = "", status: Optional[str] = None, filters: Optional[Dict[str, Any]] = None):
        """Client side search and equality filters over the fetched rows."""
        needle = (query or "").strip().lower()
        equals = dict(filters or {})
        if self.spec.status_field and status:
            equals[self.spec.status_field] = status

        result = []
        for row in self.items.values():
            if needle and not any(needle in str(row.get(f) or "").lower() for f in self.spec.search_fields):
                continue
            if any(value not in (None, "all") and row.get(name) != value for name, value in equals.items()):
                continue
            result.append(row)
        return result

    def tally(self, field: Optional[str] = None) -> Dict[str, int]:
        field = field or self.spec.status_field
        counts = {value: 0 for value in self.spec.statuses} if field == self.spec.status_field else {}
        for row in self.items.values():
            value = row.get(field)
            counts[value] = counts.get(value, 0) + 1
        return counts

    def is_pending(self, item_id: str) -> bool:
        return item_id in self.pending or item_id in self.held

    def hold(self, item_id: str, action: Optional[Callable[[], Any]] = None) -> bool:
        """
        Queue `action` for a row from a widget callback. The row reads as
        pending until run_held() sends it, so its controls render disabled
        before the request starts.
        """
        if self.is_pending(item_id):
            return False
        self.held[item_id] = action
        return True

    def release(self, item_id: str) -> bool:
        """Take a held marker back without running anything. True if it was held."""
        if item_id not in self.held:
            return False
        del self.held[item_id]
        return True

    def run_held(self) -> bool:
        held, self.held = self.held, {}
        for action in held.values():
            if action is not None:
                action()
        if held:
            self.revision += 1
        return bool(held)

    def drain_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    def notify(self, level, title: str, message: str = "") -> None:
        self.notices.append(Notice(level, title, message))

    # ---------------- local patching ----------------

    def add_confirmed(self, row: Dict[str, Any]) -> None:
        key = row[self.spec.key]
        if self.spec.descending:
            self.items = {key: row, **{k: v for k, v in self.items.items() if k != key}}
        else:
            self.items[key] = row
            self._sort_curated()

    def _replace(self, row: Dict[str, Any]) -> None:
        self.items[row[self.spec.key]] = row
        if not self.spec.descending:
            self._sort_curated()

    def _sort_curated(self) -> None:
        column = self.spec.order_by
        ordered = sorted(self.items.values(), key=lambda r: (r.get(column) is None, r.get(column) or 0))
        self.items = {r[self.spec.key]: r for r in ordered}

    # ---------------- single field updates ----------------

    def set_field(self, item_id: str, field: str, value: Any, success: str = "Updated") -> bool:
        if item_id not in self.items or item_id in self.pending:
            return False
        self.pending.add(item_id)
        try:
            row = self.resource.update(item_id, {field: value})
        except NotFound:
            logger.warning("%s %s vanished before update", self.spec.table, item_id)
            self.notify("error", "Not found", "This record no longer exists.")
            return False
        except StudioError as e:
            logger.error("Updating %s %s failed: %s", self.spec.table, item_id, e.message)
            self.notify("error", "Save failed", e.message)
            return False
        finally:
            self.pending.discard(item_id)

        self._replace(row)
        self.notify("success", success)
        return True

    def set_status(self, item_id: str, status: str) -> bool:
        if status not in self.spec.statuses:
            self.notify("error", "Invalid status", status)
            return False
        return self.set_field(item_id, self.spec.status_field, status, success=f"Marked as {status}")

    def toggle(self, item_id: str, field: str) -> bool:
        if field not in self.spec.toggle_fields:
            raise ValueError(f"{field} is not a toggle on {self.spec.table}")
        current = bool(self.items.get(item_id, {}).get(field))
        return self.set_field(item_id, field, not current)

    # ---------------- detail / editor ----------------

    def open_detail(self, item_id: str) -> None:
        self.selected_id = item_id

    def close_detail(self) -> None:
        self.selected_id = None

    @property
    def selected(self) -> Optional[Dict[str, Any]]:
        return self.items.get(self.selected_id) if self.selected_id else None

    def open_editor(self, item_id: Optional[str] = None, defaults: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if item_id is not None:
            self.draft = dict(self.items[item_id])
        else:
            self.draft = dict(defaults or {})
        self.editing_id = item_id
        return self.draft

    def close_editor(self) -> None:
        self.draft = None
        self.editing_id = None

    def attach_upload(self, file, field: str, prefix: str = "") -> Optional[str]:
        try:
            url = self.resource.upload_blob(file, prefix=prefix)
        except UploadError as e:
            self.notify("error", "Upload failed", e.message)
            return None
        if self.draft is not None:
            self.draft[field] = url
        self.notify("success", "File uploaded")
        return url

    def submit(self, values: Dict[str, Any]) -> bool:
        """Insert or update from the editor. The editor closes only on success."""
        marker = self.editing_id or NEW_ITEM
        if marker in self.pending:
            return False

        missing = missing_fields(values, self.spec.required)
        if missing:
            self.notify("error", "Please fill required fields", ", ".join(missing))
            return False

        original = self.items.get(self.editing_id, {}) if self.editing_id is not None else {}
        self.pending.add(marker)
        try:
            if self.editing_id is not None:
                patch = {
                    k: v for k, v in values.items()
                    if k not in READ_ONLY_FIELDS and original.get(k) != v
                }
                row = self.resource.update(self.editing_id, patch) if patch else original
            else:
                row = self.resource.insert({k: v for k, v in values.items() if k not in READ_ONLY_FIELDS})
        except ValidationError as e:
            self.notify("error", "Please check the form", e.message)
            return False
        except StudioError as e:
            logger.error("Saving %s failed: %s", self.spec.table, e.message)
            self.notify("error", "Save failed", e.message)
            return False
        finally:
            self.pending.discard(marker)

        if self.editing_id is not None:
            self.resource.release_replaced_media(original, row)
            self._replace(row)
            self.notify("success", f"{self.spec.label} entry updated")
        else:
            self.add_confirmed(row)
            self.notify("success", f"{self.spec.label} entry created")
        self.close_editor()
        return True

    # ---------------- delete ----------------

    def request_delete(self, item_id: str) -> None:
        self.confirming_delete = item_id

    def cancel_delete(self) -> None:
        self.confirming_delete = None

    def confirm_delete(self) -> bool:
        item_id, self.confirming_delete = self.confirming_delete, None
        if item_id is None or item_id in self.pending:
            return False

        self.pending.add(item_id)
        try:
            self.resource.delete(item_id, row=self.items.get(item_id))
        except NotFound:
            logger.info("%s %s was already deleted", self.spec.table, item_id)
        except StudioError as e:
            logger.error("Deleting %s %s failed: %s", self.spec.table, item_id, e.message)
            self.notify("error", "Delete failed", e.message)
            return False
        finally:
            self.pending.discard(item_id)

        self.items.pop(item_id, None)
        if self.selected_id == item_id:
            self.selected_id = None
        self.notify("success", "Deleted")
        return True


class MessageScreen(ResourceScreen):
    """Opening an unread message marks it read."""

    def open_detail(self, item_id: str) -> None:
        super().open_detail(item_id)
        row = self.items.get(item_id)
        if row is not None and row.get("status") == "unread":
            self.set_status(item_id, "read")


class UserScreen(ResourceScreen):
    """Profiles joined with their role rows. Accounts are never deleted here."""

    def __init__(self, profiles: ResourceClient, roles: ResourceClient):
        super().__init__(profiles)
        self.roles = roles

    def fetch(self) -> List[Dict[str, Any]]:
        profiles = self.resource.list()
        roles = {r["user_id"]: r.get("role") for r in self.roles.list()}
        return [{**p, "role": roles.get(p["id"]) or DEFAULT_ROLE} for p in profiles]

    def toggle_role(self, user_id: str) -> bool:
        row = self.items.get(user_id)
        if row is None or user_id in self.pending:
            return False
        new_role = "user" if row.get("role") == "admin" else "admin"

        self.pending.add(user_id)
        try:
            stored = self.roles.update(user_id, {"role": new_role})
        except StudioError as e:
            logger.error("Role change for %s failed: %s", user_id, e.message)
            self.notify("error", "Failed to update user role", e.message)
            return False
        finally:
            self.pending.discard(user_id)

        self._replace({**row, "role": stored.get("role", new_role)})
        self.notify("success", "Role updated", f"User is now {'an admin' if new_role == 'admin' else 'a regular user'}")
        return True

    def confirm_delete(self) -> bool:
        self.confirming_delete = None
        return False


def load_lookup(resource: ResourceClient, label: str) -> Dict[str, str]:
    """id -> label map from a second fetch, for weak references like project assignees."""
    rows = resource.list(columns=f"{resource.spec.key}, {label}")
    return {r[resource.spec.key]: r.get(label) or "" for r in rows}
