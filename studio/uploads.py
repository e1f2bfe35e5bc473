from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from db.errors import StudioError, UploadError
from studio.screens import ResourceScreen

logger = logging.getLogger(__name__)

MAX_BATCH = 10


@dataclass
class BulkUploadResult:
    created: List[Dict[str, Any]] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    ignored: int = 0


def media_type_for(file) -> str:
    return "video" if (getattr(file, "type", None) or "").startswith("video/") else "image"


def file_stem(name: str) -> str:
    return name.rsplit(".", 1)[0] if "." in name else name


def bulk_upload_gallery(
    screen: ResourceScreen,
    files: Sequence,
    title: str = "",
    description: str = "",
    category: str = "general",
) -> BulkUploadResult:
    """
    Upload up to MAX_BATCH files and create one gallery row per stored file.
    Files past the cap are ignored. A file that fails to upload or to insert
    is skipped and reported; the rest of the batch carries on.
    """
    files = list(files)
    batch = files[:MAX_BATCH]
    result = BulkUploadResult(ignored=len(files) - len(batch))

    for i, file in enumerate(batch):
        try:
            url = screen.resource.upload_blob(file, index=i)
        except UploadError as e:
            logger.warning("Skipping %s: %s", file.name, e.message)
            result.failed.append(file.name)
            continue

        payload = {
            "title": title or file_stem(file.name),
            "description": description,
            "media_url": url,
            "media_type": media_type_for(file),
            "category": category,
        }
        try:
            row = screen.resource.insert(payload)
        except StudioError as e:
            logger.error("Gallery row for %s not saved: %s", file.name, e.message)
            result.failed.append(file.name)
            continue
        result.created.append(row)

    for row in result.created:
        screen.add_confirmed(row)

    if result.created:
        screen.notify("success", "Upload successful", f"{len(result.created)} file(s) uploaded successfully.")
    if result.failed:
        screen.notify("error", "Upload failed", ", ".join(result.failed))
    if result.ignored:
        screen.notify("info", f"Only the first {MAX_BATCH} files were uploaded", f"{result.ignored} file(s) ignored.")
    return result
