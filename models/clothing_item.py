"""Clothing item data model and helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from models.taxonomy import normalise_tags, normalize_category, normalize_occasion, normalize_season

logger = logging.getLogger(__name__)


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable timestamp %r", value)
        return None


def _normalise_enum_values(values: List[Any], normaliser, label: str) -> List[str]:
    normalised: List[str] = []
    for value in values:
        key = normaliser(str(value))
        if key is None:
            logger.debug("Dropping unknown %s value %r", label, value)
            continue
        if key not in normalised:
            normalised.append(key)
    return normalised


@dataclass
class ClothingItem:
    """Represents one piece in a user's wardrobe.

    The scorer and generator only ever read items; mutation happens through
    the wardrobe store.
    """

    id: str
    name: str
    category: str
    color: str = ""
    user_id: str = ""
    subcategory: str = ""
    brand: Optional[str] = None
    size: Optional[str] = None
    season: List[str] = field(default_factory=list)
    occasion: List[str] = field(default_factory=list)
    image_url: str = ""
    tags: List[str] = field(default_factory=list)
    is_favorite: bool = False
    times_worn: int = 0
    last_worn: Optional[datetime] = None
    price: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.category = normalize_category(self.category)
        self.subcategory = str(self.subcategory or "").strip().lower()
        self.color = str(self.color or "").strip()
        self.season = _normalise_enum_values(_ensure_list(self.season), normalize_season, "season")
        self.occasion = _normalise_enum_values(_ensure_list(self.occasion), normalize_occasion, "occasion")
        self.tags = normalise_tags(_ensure_list(self.tags))
        self.times_worn = max(0, int(self.times_worn or 0))
        self.is_favorite = bool(self.is_favorite)
        self.last_worn = parse_datetime(self.last_worn)
        self.created_at = parse_datetime(self.created_at) or datetime.now(timezone.utc)
        if self.price is not None:
            self.price = float(self.price)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to a JSON-friendly dictionary."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "category": self.category,
            "subcategory": self.subcategory,
            "color": self.color,
            "brand": self.brand,
            "size": self.size,
            "season": list(self.season),
            "occasion": list(self.occasion),
            "image_url": self.image_url,
            "tags": list(self.tags),
            "is_favorite": self.is_favorite,
            "times_worn": self.times_worn,
            "last_worn": self.last_worn.isoformat() if self.last_worn else None,
            "price": self.price,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }


_CAMEL_CASE_KEYS = {
    "imageUrl": "image_url",
    "isFavorite": "is_favorite",
    "timesWorn": "times_worn",
    "lastWorn": "last_worn",
    "createdAt": "created_at",
    "userId": "user_id",
}


def from_raw_metadata(metadata: Dict[str, Any]) -> ClothingItem:
    """Factory to build a :class:`ClothingItem` from a storage row or API payload."""

    data = {_CAMEL_CASE_KEYS.get(key, key): value for key, value in metadata.items()}
    required_fields = ["id", "name"]
    missing = [name for name in required_fields if not data.get(name)]
    if missing:
        raise ValueError(f"Missing required fields for ClothingItem: {missing}")

    return ClothingItem(
        id=str(data["id"]),
        name=str(data["name"]),
        category=str(data.get("category") or ""),
        color=str(data.get("color") or ""),
        user_id=str(data.get("user_id") or ""),
        subcategory=str(data.get("subcategory") or ""),
        brand=data.get("brand"),
        size=data.get("size"),
        season=_ensure_list(data.get("season")),
        occasion=_ensure_list(data.get("occasion")),
        image_url=str(data.get("image_url") or ""),
        tags=_ensure_list(data.get("tags")),
        is_favorite=bool(data.get("is_favorite", False)),
        times_worn=int(data.get("times_worn") or 0),
        last_worn=data.get("last_worn"),
        price=data.get("price"),
        notes=data.get("notes"),
        created_at=data.get("created_at") or datetime.now(timezone.utc),
    )


__all__ = ["ClothingItem", "from_raw_metadata", "parse_datetime"]
