from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from db.errors import StudioError
from db.resources import ResourceClient

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def fetch_public(resource: ResourceClient, filters: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Row]:
    """Read-only fetch for public pages. A failure renders as an empty section."""
    try:
        return resource.list(filters=filters, limit=limit)
    except StudioError as e:
        logger.error("Public fetch of %s failed: %s", resource.table, e.message)
        return []


def partition_team(members: List[Row]) -> Tuple[List[Row], List[Row]]:
    leaders = [m for m in members if m.get("is_leader")]
    staff = [m for m in members if not m.get("is_leader")]
    return leaders, staff


def filter_by_category(items: List[Row], category: Optional[str]) -> List[Row]:
    if not category or category.lower() == "all":
        return list(items)
    return [i for i in items if i.get("category") == category]


def split_media(items: List[Row]) -> Tuple[List[Row], List[Row]]:
    images = [i for i in items if i.get("media_type") == "image"]
    videos = [i for i in items if i.get("media_type") == "video"]
    return images, videos


def featured(items: List[Row]) -> List[Row]:
    return [i for i in items if i.get("featured")]


def stars(rating) -> str:
    count = max(0, min(5, int(rating or 0)))
    return "★" * count + "☆" * (5 - count)
