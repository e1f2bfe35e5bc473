# db/resources.py

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from db.errors import BackendError, NotFound, UploadError, ValidationError
from db.models import ALL_TABLES, TableSpec

logger = logging.getLogger(__name__)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_fields(row: Dict[str, Any], required) -> List[str]:
    return [f for f in required if is_blank(row.get(f))]


def _execute(query, table: str):
    try:
        return query.execute()
    except APIError as e:
        logger.error("Supabase error on %s: %s (%s)", table, e.message, e.code)
        raise BackendError(e.message or str(e), code=e.code) from e
    except Exception as e:
        logger.exception("Request to %s failed", table)
        raise BackendError(str(e)) from e


# --- BLOB STORAGE ----------------------------------------------------------

class BlobStore:
    """Thin wrapper over `client.storage` buckets."""

    def __init__(self, client):
        self.client = client

    def upload(self, bucket: str, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        options = {"content-type": content_type} if content_type else None
        try:
            self.client.storage.from_(bucket).upload(key, data, options)
        except Exception as e:
            logger.exception("Upload of %s to bucket %s failed", key, bucket)
            raise UploadError(key, str(e)) from e
        return self.public_url(bucket, key)

    def public_url(self, bucket: str, key: str) -> str:
        return self.client.storage.from_(bucket).get_public_url(key)

    def remove(self, bucket: str, key: str) -> None:
        self.client.storage.from_(bucket).remove([key])

    @staticmethod
    def key_from_url(bucket: str, url: Optional[str]) -> Optional[str]:
        """Object key for a public URL of `bucket`, None for foreign URLs."""
        marker = f"/{bucket}/"
        if not url or marker not in url:
            return None
        return url.split(marker)[-1].split("?")[0] or None


# --- RESOURCE CLIENT -------------------------------------------------------

class ResourceClient:
    """Uniform accessor for one table. The only code that queries Supabase rows."""

    def __init__(self, client, spec: TableSpec, blobs: Optional[BlobStore] = None):
        self.client = client
        self.spec = spec
        self.blobs = blobs

    @property
    def table(self) -> str:
        return self.spec.table

    def _query(self):
        return self.client.table(self.spec.table)

    def list(
        self,
        order_by: Optional[str] = None,
        descending: Optional[bool] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        query = self._query().select(columns)
        for name, value in (filters or {}).items():
            query = query.eq(name, value)
        if descending is None:
            descending = self.spec.descending
        query = query.order(order_by or self.spec.order_by, desc=descending)
        if limit:
            query = query.limit(limit)
        response = _execute(query, self.table)
        return list(response.data or [])

    def get(self, item_id: str) -> Dict[str, Any]:
        query = self._query().select("*").eq(self.spec.key, item_id).limit(1)
        response = _execute(query, self.table)
        if not response.data:
            raise NotFound(self.table, item_id)
        return response.data[0]

    def insert(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        missing = missing_fields(payload, self.spec.required)
        if missing:
            raise ValidationError(missing)
        self.spec.check_choices(payload)

        response = _execute(self._query().insert(payload), self.table)
        if not response.data:
            raise BackendError(f"Insert into {self.table} returned no row")
        return response.data[0]

    def update(self, item_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Change only the supplied columns. Returns the row as stored."""
        blanked = [f for f in self.spec.required if f in patch and is_blank(patch[f])]
        if blanked:
            raise ValidationError(blanked)
        self.spec.check_choices(patch)

        query = self._query().update(patch).eq(self.spec.key, item_id)
        response = _execute(query, self.table)
        if not response.data:
            raise NotFound(self.table, item_id)
        return response.data[0]

    def delete(self, item_id: str, row: Optional[Dict[str, Any]] = None) -> None:
        if self.spec.media_fields and self.blobs is not None:
            if row is None:
                row = self.get(item_id)
            self._remove_media(row)

        query = self._query().delete().eq(self.spec.key, item_id)
        response = _execute(query, self.table)
        if not response.data:
            raise NotFound(self.table, item_id)

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self._query().select(self.spec.key, count="exact")
        for name, value in (filters or {}).items():
            query = query.eq(name, value)
        response = _execute(query, self.table)
        if response.count is not None:
            return response.count
        return len(response.data or [])

    # --- media ---

    def upload_blob(self, file, prefix: str = "", index: Optional[int] = None) -> str:
        """Store an uploaded file in this table's bucket and return its public URL."""
        if self.blobs is None or not self.spec.bucket:
            raise UploadError(getattr(file, "name", "file"), f"{self.table} has no storage bucket")
        ext = file.name.rsplit(".", 1)[-1] if "." in file.name else "bin"
        stamp = int(time.time() * 1000)
        key = f"{prefix}{stamp}-{index}.{ext}" if index is not None else f"{prefix}{stamp}.{ext}"
        return self.blobs.upload(self.spec.bucket, key, file.getvalue(), getattr(file, "type", None))

    def release_replaced_media(self, before: Dict[str, Any], after: Dict[str, Any]) -> None:
        """Best-effort removal of blobs a saved row no longer points at."""
        if self.blobs is None:
            return
        stale = {
            name: before.get(name) for name in self.spec.media_fields
            if before.get(name) and before.get(name) != after.get(name)
        }
        self._remove_media(stale)

    def _remove_media(self, row: Dict[str, Any]) -> None:
        for name in self.spec.media_fields:
            key = BlobStore.key_from_url(self.spec.bucket, row.get(name))
            if not key:
                continue
            try:
                self.blobs.remove(self.spec.bucket, key)
            except Exception:
                logger.warning("Could not remove %s from bucket %s", key, self.spec.bucket, exc_info=True)


def build_clients(client, with_blobs: bool = True) -> Dict[str, ResourceClient]:
    """One ResourceClient per table, keyed by table name."""
    blobs = BlobStore(client) if with_blobs else None
    return {spec.table: ResourceClient(client, spec, blobs if spec.bucket else None) for spec in ALL_TABLES}
